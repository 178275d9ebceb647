"""Defensive parsing of generation output into fully-populated domain objects.

Every variant owns an extractor table: for each field, the payload keys to try,
a coercion that returns ``_INVALID`` when the value is unusable, and the default
substituted in that case. Nothing in this module raises on bad input.
"""
from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Generic, List, Optional, Sequence, Tuple, TypeVar

from app.services.coach_models import (
    DIFFICULTIES,
    MAX_EXERCISES,
    MAX_PLAN_MUSCLE_GROUPS,
    MIN_DAILY_CALORIES,
    MIN_DAILY_WATER_ML,
    DailyNutritionTargets,
    Exercise,
    MacroSplit,
    WorkoutPlan,
    estimate_workout_calories,
)
from app.services.reward_calculator import calculate_xp_reward

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INVALID = object()
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
# NaN and Infinity literals decode to null so they are defaulted like missing values.
_DECODER = json.JSONDecoder(parse_constant=lambda _constant: None)

DEFAULT_PLAN_NAME = "Personalized Workout"
DEFAULT_CATEGORY = "strength"
DEFAULT_SETS = 3
DEFAULT_REPS = 10
DEFAULT_REST_SECONDS = 60
DEFAULT_EXERCISE_DESCRIPTION = "Move with control through a full range of motion."
DEFAULT_WATER_ML = 2000
STRICT_NUTRITION_FIELDS = frozenset({"calories", "protein_grams", "carb_grams", "fat_grams"})
STRICT_MACRO_FIELDS = frozenset({"protein_grams", "carb_grams", "fat_grams"})


@dataclass(frozen=True)
class Normalized(Generic[T]):
    """A normalized value plus the fields that had to be defaulted."""

    value: T
    defaulted: FrozenSet[str] = frozenset()
    parsed: bool = True

    def defaulted_any(self, fields: FrozenSet[str]) -> bool:
        return not self.parsed or bool(self.defaulted & fields)


@dataclass(frozen=True)
class FieldRule:
    keys: Tuple[str, ...]
    coerce: Callable[[Any], Any]
    default: Any = None


@dataclass(frozen=True)
class WorkoutDefaults:
    """Caller-derived defaults for a workout plan."""

    difficulty: str = "beginner"
    duration_minutes: int = 30
    equipment: Tuple[str, ...] = field(default_factory=tuple)


def parse_json_object(raw: Any) -> Optional[Dict[str, Any]]:
    """Return the JSON object in ``raw`` or None; tolerates fences and surrounding prose."""
    if not isinstance(raw, str):
        return None
    text = _FENCE_RE.sub("", raw.strip()).strip()
    if not text:
        return None
    start, end = text.find("{"), text.rfind("}")
    attempts: List[Callable[[], Any]] = [lambda: _DECODER.decode(text)]
    if start != -1:
        # First complete object after any prose; trailing text may hold stray braces.
        attempts.append(lambda: _DECODER.raw_decode(text, start)[0])
        if end > start:
            attempts.append(lambda: _DECODER.decode(text[start : end + 1]))
    for attempt in attempts:
        try:
            parsed = attempt()
        except (TypeError, ValueError, RecursionError):
            continue
        if isinstance(parsed, dict):
            return parsed
    logger.debug("No JSON object found in completion (%d chars)", len(text))
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _text(value: Any) -> Any:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return _INVALID


def _optional_text(value: Any) -> Any:
    if value is None:
        return None
    return _text(value)


def _int_at_least(minimum: int) -> Callable[[Any], Any]:
    def _coerce(value: Any) -> Any:
        if not _is_number(value):
            return _INVALID
        number = round(value)
        return number if number >= minimum else _INVALID

    return _coerce


def _optional_positive_int(value: Any) -> Any:
    if value is None:
        return None
    return _int_at_least(1)(value)


def _string_list(value: Any) -> Any:
    if not isinstance(value, list):
        return _INVALID
    items: List[str] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            continue
        text = str(item).strip()
        if text and text not in items:
            items.append(text)
    return items


def _difficulty(value: Any) -> Any:
    return value if value in DIFFICULTIES else _INVALID


def _extract(payload: Dict[str, Any], table: Dict[str, FieldRule]) -> Tuple[Dict[str, Any], FrozenSet[str]]:
    values: Dict[str, Any] = {}
    defaulted: set[str] = set()
    for field_name, rule in table.items():
        value = _INVALID
        for key in rule.keys:
            if key in payload:
                value = rule.coerce(payload[key])
                if value is not _INVALID:
                    break
        if value is _INVALID:
            value = rule.default() if callable(rule.default) else rule.default
            defaulted.add(field_name)
        values[field_name] = value
    return values, frozenset(defaulted)


def _exercise_table(index: int, difficulty: str) -> Dict[str, FieldRule]:
    return {
        "name": FieldRule(("name",), _text, f"Exercise {index + 1}"),
        "sets": FieldRule(("sets",), _int_at_least(1), DEFAULT_SETS),
        "reps": FieldRule(("reps",), _int_at_least(1), DEFAULT_REPS),
        "duration_seconds": FieldRule(("duration_seconds", "duration"), _optional_positive_int, None),
        "rest_seconds": FieldRule(("rest_seconds", "restTime", "rest"), _int_at_least(0), DEFAULT_REST_SECONDS),
        "description": FieldRule(("description",), _text, DEFAULT_EXERCISE_DESCRIPTION),
        "muscle_groups": FieldRule(("muscle_groups", "muscleGroups"), _string_list, list),
        "equipment": FieldRule(("equipment",), _string_list, list),
        "difficulty": FieldRule(("difficulty",), _difficulty, difficulty),
    }


def normalize_exercise(raw: Any, index: int, difficulty: str) -> Exercise:
    payload = raw if isinstance(raw, dict) else {}
    values, _ = _extract(payload, _exercise_table(index, difficulty))
    return Exercise(**values)


def normalize_exercises(raw: Any, difficulty: str) -> List[Exercise]:
    """Cap at the plan maximum and top up to one placeholder when empty."""
    source: Sequence[Any] = raw if isinstance(raw, list) else []
    exercises = [normalize_exercise(item, index, difficulty) for index, item in enumerate(source[:MAX_EXERCISES])]
    if not exercises:
        exercises.append(normalize_exercise({}, 0, difficulty))
    return exercises


def plan_muscle_groups(exercises: Sequence[Exercise]) -> List[str]:
    groups: List[str] = []
    for exercise in exercises:
        for group in exercise.muscle_groups:
            if group not in groups:
                groups.append(group)
    return groups[:MAX_PLAN_MUSCLE_GROUPS]


def normalize_workout_plan(raw: Any, defaults: WorkoutDefaults) -> Normalized[WorkoutPlan]:
    parsed = parse_json_object(raw)
    payload = parsed or {}
    table = {
        "name": FieldRule(("name",), _text, DEFAULT_PLAN_NAME),
        "difficulty": FieldRule(("difficulty",), _difficulty, defaults.difficulty),
        "duration_minutes": FieldRule(("duration_minutes", "duration"), _int_at_least(1), defaults.duration_minutes),
        "category": FieldRule(("category",), _text, DEFAULT_CATEGORY),
        "equipment": FieldRule(("equipment",), _string_list, lambda: list(defaults.equipment)),
    }
    values, defaulted = _extract(payload, table)
    description_values, description_defaulted = _extract(
        payload,
        {"description": FieldRule(("description",), _text, f"A personalized {values['category']} session.")},
    )
    exercises = normalize_exercises(payload.get("exercises"), values["difficulty"])
    plan = WorkoutPlan(
        name=values["name"],
        description=description_values["description"],
        difficulty=values["difficulty"],
        duration_minutes=values["duration_minutes"],
        category=values["category"],
        exercises=exercises,
        equipment=values["equipment"],
        muscle_groups=plan_muscle_groups(exercises),
        calories=estimate_workout_calories(values["difficulty"], values["duration_minutes"]),
        xp_reward=calculate_xp_reward(values["difficulty"], values["duration_minutes"]),
    )
    return Normalized(plan, defaulted | description_defaulted, parsed is not None)


_TARGETS_TABLE: Dict[str, FieldRule] = {
    "calories": FieldRule(("calories",), _int_at_least(0), MIN_DAILY_CALORIES),
    "protein_grams": FieldRule(("protein_grams", "protein"), _int_at_least(0), 0),
    "carb_grams": FieldRule(("carb_grams", "carbs"), _int_at_least(0), 0),
    "fat_grams": FieldRule(("fat_grams", "fat"), _int_at_least(0), 0),
    "water_ml": FieldRule(("water_ml", "water"), _int_at_least(0), DEFAULT_WATER_ML),
    "rationale": FieldRule(("rationale",), _optional_text, None),
}

_MACRO_TABLE: Dict[str, FieldRule] = {
    "protein_grams": FieldRule(("protein_grams", "protein"), _int_at_least(0), 0),
    "carb_grams": FieldRule(("carb_grams", "carbs"), _int_at_least(0), 0),
    "fat_grams": FieldRule(("fat_grams", "fat"), _int_at_least(0), 0),
    "note": FieldRule(("note",), _optional_text, None),
}


def normalize_daily_targets(raw: Any) -> Normalized[DailyNutritionTargets]:
    parsed = parse_json_object(raw)
    values, defaulted = _extract(parsed or {}, _TARGETS_TABLE)
    values["calories"] = max(MIN_DAILY_CALORIES, values["calories"])
    values["water_ml"] = max(MIN_DAILY_WATER_ML, values["water_ml"])
    return Normalized(DailyNutritionTargets(**values), defaulted, parsed is not None)


def normalize_macro_split(raw: Any) -> Normalized[MacroSplit]:
    parsed = parse_json_object(raw)
    values, defaulted = _extract(parsed or {}, _MACRO_TABLE)
    return Normalized(MacroSplit(**values), defaulted, parsed is not None)
