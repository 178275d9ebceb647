"""Tests for XP and reward event derivation."""
from __future__ import annotations

from datetime import date

import pytest

from app.services.coach_models import MacroSplit, WorkoutPlanParams
from app.services.fallback_computer import fallback_workout_plan
from app.services.reward_calculator import (
    NUTRITION_REWARD_XP,
    calculate_xp_reward,
    compute_reward,
)


def test_xp_examples() -> None:
    assert calculate_xp_reward("beginner", 30) == 100
    assert calculate_xp_reward("intermediate", 1) == 75
    assert calculate_xp_reward("advanced", 45) == 300
    assert calculate_xp_reward("advanced", 46) == 400


def test_xp_is_monotonic_in_difficulty_and_duration() -> None:
    previous_by_level = {}
    for duration in range(1, 181):
        values = [calculate_xp_reward(level, duration) for level in ("beginner", "intermediate", "advanced")]
        assert values == sorted(values)
        for level, value in zip(("beginner", "intermediate", "advanced"), values):
            assert value >= previous_by_level.get(level, 0)
            previous_by_level[level] = value


def test_xp_defaults_for_unknown_inputs() -> None:
    assert calculate_xp_reward("legendary", None) == calculate_xp_reward("beginner", 30)
    assert calculate_xp_reward("beginner", 0) == 50


def test_workout_reward_uses_plan_xp() -> None:
    plan = fallback_workout_plan(WorkoutPlanParams(fitness_level="advanced", duration_minutes=45))

    event = compute_reward(plan, "workout_plan", today=date(2026, 3, 1), event_id="evt-1")

    assert event.id == "evt-1"
    assert event.category == "mainMission"
    assert event.base_amount == plan.xp_reward == 300
    assert event.date == "2026-03-01"
    assert event.completed is True
    assert plan.name in event.description


def test_nutrition_reward_amount_is_independent_of_readiness() -> None:
    split = MacroSplit(protein_grams=150, carb_grams=200, fat_grams=67)

    low = compute_reward(split, "macro_split", readiness_band="low")
    high = compute_reward(split, "macro_split", readiness_band="high")

    assert low.base_amount == high.base_amount == NUTRITION_REWARD_XP
    assert low.category == "sideMission:low"
    assert high.category == "sideMission:high"
    assert low.id != high.id


def test_reward_kind_misuse_raises() -> None:
    with pytest.raises(TypeError):
        compute_reward("advice text", "workout_plan")
    with pytest.raises(ValueError):
        compute_reward("advice text", "badge")  # type: ignore[arg-type]
