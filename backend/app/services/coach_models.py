"""Value objects shared by the coach generation pipeline."""
from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

Difficulty = Literal["beginner", "intermediate", "advanced"]
ReadinessLevel = Literal["low", "medium", "high"]
MacroPreset = Literal["balanced", "highProtein", "lowCarb", "keto", "carbLoad", "recovery"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "athlete"]

DIFFICULTIES: Tuple[str, ...] = ("beginner", "intermediate", "advanced")
MAX_EXERCISES = 12
MAX_PLAN_MUSCLE_GROUPS = 8
MIN_DAILY_CALORIES = 1000
MIN_DAILY_WATER_ML = 1500
CALORIES_PER_MINUTE = {"beginner": 5, "intermediate": 7, "advanced": 9}


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ChatMessage(_FrozenModel):
    role: Literal["system", "user", "assistant"]
    content: str


class GenerationRequest(_FrozenModel):
    """Ordered, role-tagged messages sent to the generation endpoint."""

    messages: Tuple[ChatMessage, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _system_messages_first(self) -> "GenerationRequest":
        seen_other = False
        for message in self.messages:
            if message.role != "system":
                seen_other = True
            elif seen_other:
                raise ValueError("system messages must precede user and assistant messages")
        return self

    def as_payload(self) -> List[dict]:
        return [{"role": message.role, "content": message.content} for message in self.messages]


class ReadinessContext(_FrozenModel):
    """Coarse recovery signal supplied by the readiness provider."""

    level: ReadinessLevel = "medium"
    descriptor: str = ""


class MoodSnapshot(_FrozenModel):
    """Wearable-style 1-5 scores the readiness provider classifies."""

    mood: int = Field(..., ge=1, le=5)
    energy: int = Field(..., ge=1, le=5)
    stress: int = Field(..., ge=1, le=5)
    sleep: int = Field(..., ge=1, le=5)
    confidence: int = Field(default=50, ge=0, le=100, description="Data completeness 0-100.")


class Exercise(_FrozenModel):
    name: str
    sets: int
    reps: int
    duration_seconds: Optional[int] = None
    rest_seconds: int
    description: str
    muscle_groups: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    difficulty: Difficulty


class WorkoutPlan(_FrozenModel):
    name: str
    description: str
    difficulty: Difficulty
    duration_minutes: int
    category: str
    exercises: List[Exercise] = Field(..., min_length=1, max_length=MAX_EXERCISES)
    equipment: List[str] = Field(default_factory=list)
    muscle_groups: List[str] = Field(default_factory=list, max_length=MAX_PLAN_MUSCLE_GROUPS)
    calories: int
    xp_reward: int


class DailyNutritionTargets(_FrozenModel):
    calories: int = Field(..., ge=MIN_DAILY_CALORIES)
    protein_grams: int = Field(..., ge=0)
    carb_grams: int = Field(..., ge=0)
    fat_grams: int = Field(..., ge=0)
    water_ml: int = Field(..., ge=MIN_DAILY_WATER_ML)
    rationale: Optional[str] = None


class MacroSplit(_FrozenModel):
    protein_grams: int = Field(..., ge=0)
    carb_grams: int = Field(..., ge=0)
    fat_grams: int = Field(..., ge=0)
    note: Optional[str] = None


class RewardEvent(_FrozenModel):
    """Gamification ledger entry; written once, never mutated."""

    id: str
    category: str
    base_amount: int = Field(..., ge=0)
    multiplier: float = 1.0
    date: str
    description: str
    completed: Literal[True] = True


class WorkoutPlanParams(BaseModel):
    fitness_level: Difficulty = "beginner"
    goals: List[str] = Field(default_factory=list)
    default_goals: List[str] = Field(default_factory=list, description="Caller's stored goals used when goals is empty.")
    duration_minutes: int = Field(default=30, ge=5, le=180)
    equipment: List[str] = Field(default_factory=list)
    restrictions: List[str] = Field(default_factory=list)


class DailyTargetsParams(BaseModel):
    goals: List[str] = Field(default_factory=list)
    default_goals: List[str] = Field(default_factory=list)
    restrictions: List[str] = Field(default_factory=list)
    current_weight_kg: Optional[float] = Field(default=None, gt=0, le=400)
    activity_level: ActivityLevel = "moderate"


class MacroSplitParams(BaseModel):
    preset: MacroPreset = "balanced"
    calories: float = Field(..., ge=MIN_DAILY_CALORIES, le=10000)


class NutritionAdviceParams(BaseModel):
    goals: List[str] = Field(default_factory=list)
    default_goals: List[str] = Field(default_factory=list)
    restrictions: List[str] = Field(default_factory=list)
    current_weight_kg: Optional[float] = Field(default=None, gt=0, le=400)
    target_weight_kg: Optional[float] = Field(default=None, gt=0, le=400)


def estimate_workout_calories(difficulty: str, duration_minutes: int) -> int:
    """Rough burn estimate derived from difficulty and duration."""
    per_minute = CALORIES_PER_MINUTE.get(difficulty, CALORIES_PER_MINUTE["beginner"])
    return max(50, round((duration_minutes or 30) * per_minute))


def resolve_goals(goals: List[str], default_goals: List[str]) -> List[str]:
    """Return caller goals, or their stored defaults when none were given."""
    cleaned = [goal.strip() for goal in goals if isinstance(goal, str) and goal.strip()]
    if cleaned:
        return cleaned
    return [goal.strip() for goal in default_goals if isinstance(goal, str) and goal.strip()]
