"""Builds role-tagged generation requests for each coach intent."""
from __future__ import annotations

from typing import List, Optional, Sequence

from app.services.coach_models import (
    ChatMessage,
    DailyTargetsParams,
    GenerationRequest,
    MacroSplitParams,
    NutritionAdviceParams,
    ReadinessContext,
    WorkoutPlanParams,
    resolve_goals,
)
from app.services.fallback_computer import MACRO_PRESET_RATIOS
from app.services.readiness import CALORIE_BAND_PCT, VOLUME_BAND_PCT, WATER_BONUS_ML

JSON_CONTRACT = "Respond with ONLY minified JSON matching schema {schema}. No markdown, no code fences, no text outside JSON."

WORKOUT_SCHEMA = (
    '{"name":string,"description":string,"difficulty":"beginner"|"intermediate"|"advanced",'
    '"duration_minutes":number,"category":string,"equipment":string[],'
    '"exercises":[{"name":string,"description":string,"muscle_groups":string[],"sets":number,'
    '"reps":number,"duration_seconds"?:number,"rest_seconds":number,"equipment":string[],'
    '"difficulty"?:"beginner"|"intermediate"|"advanced"}]}'
)
TARGETS_SCHEMA = (
    '{"calories":number,"protein_grams":number,"carb_grams":number,"fat_grams":number,'
    '"water_ml":number,"rationale"?:string}'
)
MACRO_SCHEMA = '{"protein_grams":number,"carb_grams":number,"fat_grams":number,"note"?:string}'
ADVICE_CONTRACT = "Respond with ONLY the advice text: 120-180 words, terse bullet-like lines, no preamble."

DEFAULT_GOAL_TEXT = "general fitness"


def _pct_range(bands, band: str) -> str:
    low, high = sorted(abs(value) for value in bands[band])
    return f"{low}-{high}%"


def _training_readiness_rules() -> str:
    return (
        "If TodayRecovery readiness is low, favor deload, technique, mobility and zone2 work and reduce "
        f"volume/intensity by {_pct_range(VOLUME_BAND_PCT, 'low')} with longer rests. "
        "If readiness is high, you may increase volume/intensity modestly "
        f"({_pct_range(VOLUME_BAND_PCT, 'high')}) while staying safe. Medium readiness keeps the normal plan."
    )


def _nutrition_readiness_rules() -> str:
    bonus_low, bonus_high = WATER_BONUS_ML["low"]
    return (
        "Use TodayRecovery readiness to auto-regulate: high -> raise calories and carbs by "
        f"{_pct_range(CALORIE_BAND_PCT, 'high')} (starches around training), slightly lower fat; "
        f"low -> lower calories and carbs by {_pct_range(CALORIE_BAND_PCT, 'low')} (prefer low-GI), "
        f"emphasize recovery foods, add {bonus_low}-{bonus_high}ml water and electrolytes, keep protein "
        "1.8-2.2 g/kg; medium -> balanced split."
    )


def _recovery_clause(readiness: Optional[ReadinessContext]) -> str:
    if readiness is None:
        return ""
    details = f", {readiness.descriptor.strip()}" if readiness.descriptor.strip() else ""
    return f" TodayRecovery(readiness:{readiness.level}{details})."


def _list_clause(label: str, values: Sequence[str]) -> str:
    cleaned = [value.strip() for value in values if value and value.strip()]
    if not cleaned:
        return ""
    return f" {label}: {', '.join(cleaned)}."


def _request(system_content: str, user_content: str) -> GenerationRequest:
    return GenerationRequest(
        messages=(
            ChatMessage(role="system", content=system_content),
            ChatMessage(role="user", content=user_content.strip()),
        )
    )


def compose_workout_request(params: WorkoutPlanParams, readiness: Optional[ReadinessContext] = None) -> GenerationRequest:
    system = "You are a professional fitness trainer. " + JSON_CONTRACT.format(schema=WORKOUT_SCHEMA)
    if readiness is not None:
        system = f"{system} {_training_readiness_rules()}"
    if params.restrictions:
        system = f"{system} Respect dietary restrictions for any intra/post-workout fueling suggestions."
    goals = resolve_goals(params.goals, params.default_goals) or [DEFAULT_GOAL_TEXT]
    equipment = ", ".join(params.equipment) if params.equipment else "none"
    user = (
        f"Create a workout plan. Level: {params.fitness_level}. Goals: {', '.join(goals)}. "
        f"Duration: {params.duration_minutes} minutes. Equipment: {equipment}."
        f"{_list_clause('PreferredGoalDefaults', params.default_goals)}"
        f"{_list_clause('DietaryRestrictions', params.restrictions)}"
        " Include 4-8 exercises and ensure realistic rest times and reps."
        f"{_recovery_clause(readiness)}"
    )
    return _request(system, user)


def compose_daily_targets_request(
    params: DailyTargetsParams, readiness: Optional[ReadinessContext] = None
) -> GenerationRequest:
    system = "You are a sports nutrition coach. " + JSON_CONTRACT.format(schema=TARGETS_SCHEMA)
    if readiness is not None:
        system = f"{system} {_nutrition_readiness_rules()}"
    system = f"{system} Respect dietary restrictions."
    goals = resolve_goals(params.goals, params.default_goals) or [DEFAULT_GOAL_TEXT]
    weight = f" Weight: {params.current_weight_kg:g}kg." if params.current_weight_kg else ""
    user = (
        f"Goals: {', '.join(goals)}."
        f"{_list_clause('PreferredGoalDefaults', params.default_goals)}"
        f"{weight} Activity: {params.activity_level}."
        f"{_list_clause('Restrictions', params.restrictions)}"
        f"{_recovery_clause(readiness)}"
    )
    return _request(system, user)


def compose_macro_split_request(params: MacroSplitParams) -> GenerationRequest:
    ratios = ", ".join(
        f"{name} {round(p * 100)}/{round(c * 100)}/{round(f * 100)}"
        for name, (p, c, f) in MACRO_PRESET_RATIOS.items()
    )
    system = (
        JSON_CONTRACT.format(schema=MACRO_SCHEMA)
        + f" Compute grams for the given calories and named preset: {', '.join(MACRO_PRESET_RATIOS)}."
        + f" Typical protein/carb/fat ratios: {ratios}."
    )
    user = f"Preset: {params.preset}. Calories: {params.calories:g}."
    return _request(system, user)


def compose_nutrition_advice_request(
    params: NutritionAdviceParams, readiness: Optional[ReadinessContext] = None
) -> GenerationRequest:
    system = (
        "You are a certified nutritionist. "
        f"{ADVICE_CONTRACT} Include: daily calories, macro split with gram targets, fueling timing, "
        "3-5 food ideas, 2 tips adapted to readiness. Respect restrictions."
    )
    if readiness is not None:
        system = f"{system} {_nutrition_readiness_rules()}"
    goals = resolve_goals(params.goals, params.default_goals) or [DEFAULT_GOAL_TEXT]
    current = f" Current: {params.current_weight_kg:g}kg." if params.current_weight_kg else ""
    target = f" Target: {params.target_weight_kg:g}kg." if params.target_weight_kg else ""
    user = (
        f"Goals: {', '.join(goals)}."
        f"{_list_clause('PreferredGoalDefaults', params.default_goals)}"
        f"{current}{target}"
        f"{_list_clause('Restrictions', params.restrictions)}"
        f"{_recovery_clause(readiness)}"
        " Provide precise, safe, practical guidance for today."
    )
    return _request(system, user)


def compose_chat_request(messages: List[ChatMessage]) -> GenerationRequest:
    """Ad-hoc chat passes the caller's transcript through unchanged."""
    return GenerationRequest(messages=tuple(messages))
