"""Regression tests for application route registration."""
from fastapi.routing import APIRoute

from app.main import app

COACH_ENDPOINTS = {
    "/coach/workout-plan",
    "/coach/daily-targets",
    "/coach/macro-split",
    "/coach/nutrition-advice",
    "/coach/chat",
}


def test_coach_routes_registered_once_as_post() -> None:
    """Every coach intent is mounted exactly once and only accepts POST."""
    coach_routes = [route for route in app.routes if isinstance(route, APIRoute) and route.path.startswith("/coach")]

    assert sorted(route.path for route in coach_routes) == sorted(COACH_ENDPOINTS)
    assert all(route.methods == {"POST"} for route in coach_routes)
