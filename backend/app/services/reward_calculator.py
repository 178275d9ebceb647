"""Gamification reward derivation for completed coach results."""
from __future__ import annotations

import math
from datetime import date
from typing import Literal, Optional, Union
from uuid import uuid4

from app.services.coach_models import DailyNutritionTargets, MacroSplit, RewardEvent, WorkoutPlan

RewardKind = Literal["workout_plan", "daily_targets", "macro_split", "nutrition_advice"]

WORKOUT_BASE_XP = 50
DIFFICULTY_XP_MULTIPLIER = {"beginner": 1.0, "intermediate": 1.5, "advanced": 2.0}
XP_DURATION_BLOCK_MINUTES = 15
DEFAULT_DURATION_MINUTES = 30
NUTRITION_REWARD_XP = 375
WORKOUT_CATEGORY = "mainMission"
NUTRITION_CATEGORY = "sideMission"

NUTRITION_DESCRIPTIONS = {
    "daily_targets": "Received daily nutrition targets",
    "macro_split": "Received macro split",
    "nutrition_advice": "Received nutrition advice",
}


def calculate_xp_reward(difficulty: str, duration_minutes: Optional[float]) -> int:
    """XP = base x difficulty multiplier x started 15-minute blocks (at least one)."""
    multiplier = DIFFICULTY_XP_MULTIPLIER.get(difficulty, DIFFICULTY_XP_MULTIPLIER["beginner"])
    minutes = duration_minutes if isinstance(duration_minutes, (int, float)) and math.isfinite(duration_minutes) else DEFAULT_DURATION_MINUTES
    blocks = max(1, math.ceil(minutes / XP_DURATION_BLOCK_MINUTES))
    return round(WORKOUT_BASE_XP * multiplier * blocks)


def compute_reward(
    result: Union[WorkoutPlan, DailyNutritionTargets, MacroSplit, str],
    kind: RewardKind,
    *,
    readiness_band: str = "medium",
    today: Optional[date] = None,
    event_id: Optional[str] = None,
) -> RewardEvent:
    """Build the reward event for one result, however it was produced.

    Nutrition rewards are a flat amount; the readiness band only tags the
    category for analytics.
    """
    event_date = (today or date.today()).isoformat()
    identifier = event_id or uuid4().hex

    if kind == "workout_plan":
        if not isinstance(result, WorkoutPlan):
            raise TypeError("workout_plan rewards require a WorkoutPlan")
        return RewardEvent(
            id=identifier,
            category=WORKOUT_CATEGORY,
            base_amount=calculate_xp_reward(result.difficulty, result.duration_minutes),
            multiplier=1.0,
            date=event_date,
            description=f"Created {result.name} workout plan",
        )

    if kind not in NUTRITION_DESCRIPTIONS:
        raise ValueError(f"Unknown reward kind: {kind!r}")
    return RewardEvent(
        id=identifier,
        category=f"{NUTRITION_CATEGORY}:{readiness_band}",
        base_amount=NUTRITION_REWARD_XP,
        multiplier=1.0,
        date=event_date,
        description=f"{NUTRITION_DESCRIPTIONS[kind]} ({readiness_band} readiness)",
    )
