"""Tests for the deterministic offline coach results."""
from __future__ import annotations

import pytest

from app.services.coach_models import (
    DailyTargetsParams,
    NutritionAdviceParams,
    ReadinessContext,
    WorkoutPlanParams,
)
from app.services.fallback_computer import (
    KCAL_PER_GRAM,
    MACRO_PRESET_RATIOS,
    compute_macro_split,
    fallback_daily_targets,
    fallback_nutrition_advice,
    fallback_workout_plan,
    primary_goal,
)
from app.services.reward_calculator import calculate_xp_reward

LOW = ReadinessContext(level="low", descriptor="sleep:2/5")
HIGH = ReadinessContext(level="high")


def test_keto_split_for_two_thousand_calories() -> None:
    split = compute_macro_split("keto", 2000)

    assert (split.protein_grams, split.carb_grams, split.fat_grams) == (125, 25, 156)
    assert split.note == "Local fallback"


@pytest.mark.parametrize("preset", sorted(MACRO_PRESET_RATIOS))
def test_macro_split_energy_is_conserved_within_two_percent(preset: str) -> None:
    for calories in range(1000, 6001, 250):
        split = compute_macro_split(preset, calories)
        energy = (
            split.protein_grams * KCAL_PER_GRAM["protein"]
            + split.carb_grams * KCAL_PER_GRAM["carbs"]
            + split.fat_grams * KCAL_PER_GRAM["fat"]
        )
        assert abs(energy - calories) <= calories * 0.02


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        compute_macro_split("paleo", 2000)


def test_primary_goal_detection() -> None:
    assert primary_goal(["Lose weight before summer"]) == "fat_loss"
    assert primary_goal(["build muscle"]) == "muscle_gain"
    assert primary_goal(["feel better"]) == "maintenance"
    assert primary_goal([]) == "maintenance"


def test_fat_loss_targets_shift_with_readiness() -> None:
    params = DailyTargetsParams(goals=["fat loss"])

    low = fallback_daily_targets(params, LOW)
    medium = fallback_daily_targets(params)
    high = fallback_daily_targets(params, HIGH)

    assert medium.calories == 1900
    assert low.calories < medium.calories < high.calories
    assert 0.80 <= low.calories / medium.calories <= 0.90
    assert 1.10 <= high.calories / medium.calories <= 1.20
    assert low.water_ml > medium.water_ml
    assert "low readiness" in (low.rationale or "")


def test_targets_use_default_goals_when_none_given() -> None:
    targets = fallback_daily_targets(DailyTargetsParams(default_goals=["muscle gain"]))

    assert targets.calories == 2400
    assert targets.calories >= 1000 and targets.water_ml >= 1500


@pytest.mark.parametrize("duration", [5, 20, 30, 48, 90, 180])
@pytest.mark.parametrize("level", ["beginner", "intermediate", "advanced"])
def test_fallback_workout_is_a_valid_bodyweight_plan(duration: int, level: str) -> None:
    plan = fallback_workout_plan(WorkoutPlanParams(fitness_level=level, duration_minutes=duration))

    assert 4 <= len(plan.exercises) <= 8
    assert plan.difficulty == level
    assert plan.duration_minutes == duration
    assert plan.equipment == ["bodyweight"]
    assert plan.xp_reward == calculate_xp_reward(level, duration)
    assert len(plan.muscle_groups) <= 8
    for exercise in plan.exercises:
        assert exercise.name and exercise.description
        assert exercise.sets >= 1 and exercise.reps >= 1
        assert exercise.difficulty == level


def test_low_readiness_workout_is_lighter_than_high() -> None:
    params = WorkoutPlanParams(fitness_level="intermediate", duration_minutes=30)

    low = fallback_workout_plan(params, LOW)
    high = fallback_workout_plan(params, HIGH)

    assert low.exercises[0].reps < high.exercises[0].reps
    assert low.exercises[0].rest_seconds > high.exercises[0].rest_seconds
    holds = [exercise for exercise in low.exercises if exercise.duration_seconds]
    assert holds and all(exercise.reps == 1 for exercise in holds)


def test_fallback_advice_mentions_targets_and_restrictions() -> None:
    advice = fallback_nutrition_advice(
        NutritionAdviceParams(goals=["fat loss"], restrictions=["vegetarian"]), LOW
    )

    assert "1615 kcal" in advice
    assert "vegetarian" in advice
    assert "Recovery day" in advice
