"""Deterministic offline results used when the generation endpoint cannot be trusted."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from app.services.coach_models import (
    MAX_PLAN_MUSCLE_GROUPS,
    DailyNutritionTargets,
    DailyTargetsParams,
    Exercise,
    MacroSplit,
    NutritionAdviceParams,
    ReadinessContext,
    WorkoutPlan,
    WorkoutPlanParams,
    estimate_workout_calories,
    resolve_goals,
)
from app.services.readiness import calorie_factor, readiness_band, volume_factor, water_bonus_ml
from app.services.reward_calculator import calculate_xp_reward

KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}

# (protein, carbs, fat) shares of total calories.
MACRO_PRESET_RATIOS: Dict[str, Tuple[float, float, float]] = {
    "balanced": (0.30, 0.40, 0.30),
    "highProtein": (0.40, 0.35, 0.25),
    "lowCarb": (0.35, 0.25, 0.40),
    "keto": (0.25, 0.05, 0.70),
    "carbLoad": (0.25, 0.60, 0.15),
    "recovery": (0.30, 0.50, 0.20),
}

BASE_CALORIES_BY_GOAL = {"fat_loss": 1900, "muscle_gain": 2400, "maintenance": 2100}
GOAL_MACRO_PRESET = {"fat_loss": "highProtein", "muscle_gain": "balanced", "maintenance": "balanced"}
GOAL_KEYWORDS = {
    "fat_loss": ("fat loss", "weight loss", "lose weight", "lose fat", "lean out"),
    "muscle_gain": ("muscle gain", "build muscle", "gain muscle", "hypertrophy", "bulk"),
}
BASE_WATER_ML = 2200

SETS_BY_LEVEL = {"beginner": 2, "intermediate": 3, "advanced": 4}
BASE_REPS = 10
BASE_HOLD_SECONDS = 30
REST_SECONDS_BY_BAND = {"low": 90, "medium": 60, "high": 60}
MIN_FALLBACK_EXERCISES = 4
MAX_FALLBACK_EXERCISES = 8
MINUTES_PER_EXERCISE = 6

FALLBACK_EXERCISES: List[Dict[str, Any]] = [
    {
        "name": "Bodyweight Squat",
        "muscle_groups": ["quadriceps", "glutes"],
        "description": "Feet shoulder-width, sit back to parallel, drive up through the heels.",
    },
    {
        "name": "Push-Up",
        "muscle_groups": ["chest", "triceps", "shoulders"],
        "description": "Straight line from head to heels; drop to the knees to keep form clean.",
    },
    {
        "name": "Glute Bridge",
        "muscle_groups": ["glutes", "hamstrings"],
        "description": "Drive hips up, squeeze at the top for a one-second pause.",
    },
    {
        "name": "Reverse Lunge",
        "muscle_groups": ["quadriceps", "glutes", "hamstrings"],
        "description": "Step back, lower the rear knee under control, alternate legs.",
    },
    {
        "name": "Plank",
        "muscle_groups": ["core"],
        "description": "Elbows under shoulders, brace the trunk, breathe steadily.",
        "hold": True,
    },
    {
        "name": "Bird Dog",
        "muscle_groups": ["core", "lower back"],
        "description": "Reach opposite arm and leg long without rotating the hips.",
    },
    {
        "name": "Mountain Climber",
        "muscle_groups": ["core", "shoulders", "hip flexors"],
        "description": "Hands under shoulders, drive knees in at a controlled pace.",
    },
    {
        "name": "Superman Hold",
        "muscle_groups": ["lower back", "glutes"],
        "description": "Lift chest and legs off the floor, hold briefly, lower slowly.",
        "hold": True,
    },
]


def compute_macro_split(preset: str, calories: float, note: Optional[str] = "Local fallback") -> MacroSplit:
    """Split calories into gram targets for a named preset.

    Raises ValueError for an unknown preset; callers validate presets upstream.
    """
    ratios = MACRO_PRESET_RATIOS.get(preset)
    if ratios is None:
        raise ValueError(f"Unknown macro preset: {preset!r}")
    protein_share, carb_share, fat_share = ratios
    total = max(0.0, float(calories))
    return MacroSplit(
        protein_grams=round(total * protein_share / KCAL_PER_GRAM["protein"]),
        carb_grams=round(total * carb_share / KCAL_PER_GRAM["carbs"]),
        fat_grams=round(total * fat_share / KCAL_PER_GRAM["fat"]),
        note=note,
    )


def primary_goal(goals: List[str]) -> str:
    text = " ".join(goals).lower()
    for goal_key, keywords in GOAL_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return goal_key
    return "maintenance"


def fallback_daily_targets(
    params: DailyTargetsParams, readiness: Optional[ReadinessContext] = None
) -> DailyNutritionTargets:
    band = readiness_band(readiness)
    goal_key = primary_goal(resolve_goals(params.goals, params.default_goals))
    calories = round(BASE_CALORIES_BY_GOAL[goal_key] * calorie_factor(band))
    split = compute_macro_split(GOAL_MACRO_PRESET[goal_key], calories, note=None)
    return DailyNutritionTargets(
        calories=calories,
        protein_grams=split.protein_grams,
        carb_grams=split.carb_grams,
        fat_grams=split.fat_grams,
        water_ml=BASE_WATER_ML + water_bonus_ml(band),
        rationale=f"Fallback defaults for {goal_key.replace('_', ' ')} ({band} readiness).",
    )


def _fallback_exercise(template: Dict[str, Any], level: str, band: str) -> Exercise:
    factor = volume_factor(band)
    is_hold = bool(template.get("hold"))
    return Exercise(
        name=template["name"],
        sets=SETS_BY_LEVEL[level],
        reps=1 if is_hold else max(1, round(BASE_REPS * factor)),
        duration_seconds=max(10, round(BASE_HOLD_SECONDS * factor)) if is_hold else None,
        rest_seconds=REST_SECONDS_BY_BAND.get(band, 60),
        description=template["description"],
        muscle_groups=list(template["muscle_groups"]),
        equipment=["bodyweight"],
        difficulty=level,
    )


def fallback_workout_plan(params: WorkoutPlanParams, readiness: Optional[ReadinessContext] = None) -> WorkoutPlan:
    band = readiness_band(readiness)
    level = params.fitness_level
    count = max(MIN_FALLBACK_EXERCISES, min(MAX_FALLBACK_EXERCISES, params.duration_minutes // MINUTES_PER_EXERCISE))
    exercises = [_fallback_exercise(template, level, band) for template in FALLBACK_EXERCISES[:count]]
    muscle_groups: List[str] = []
    for exercise in exercises:
        for group in exercise.muscle_groups:
            if group not in muscle_groups:
                muscle_groups.append(group)
    return WorkoutPlan(
        name="Personalized Workout",
        description=f"Offline {level} bodyweight circuit tuned for {band} readiness.",
        difficulty=level,
        duration_minutes=params.duration_minutes,
        category="bodyweight",
        exercises=exercises,
        equipment=["bodyweight"],
        muscle_groups=muscle_groups[:MAX_PLAN_MUSCLE_GROUPS],
        calories=estimate_workout_calories(level, params.duration_minutes),
        xp_reward=calculate_xp_reward(level, params.duration_minutes),
    )


def fallback_nutrition_advice(params: NutritionAdviceParams, readiness: Optional[ReadinessContext] = None) -> str:
    band = readiness_band(readiness)
    targets = fallback_daily_targets(
        DailyTargetsParams(goals=params.goals, default_goals=params.default_goals, restrictions=params.restrictions),
        readiness,
    )
    lines = [
        f"- Calories: ~{targets.calories} kcal today.",
        f"- Macros: {targets.protein_grams}g protein, {targets.carb_grams}g carbs, {targets.fat_grams}g fat.",
        f"- Water: {targets.water_ml}ml spread through the day.",
        "- Timing: protein at every meal, most carbs around training.",
    ]
    if band == "low":
        lines.append("- Recovery day: lean on oily fish, berries, leafy greens; limit late caffeine.")
    elif band == "high":
        lines.append("- High readiness: add a starch serving before training.")
    if params.restrictions:
        lines.append(f"- Keep every choice within: {', '.join(params.restrictions)}.")
    return "\n".join(lines)
