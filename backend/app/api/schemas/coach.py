"""Pydantic schemas for coach API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from app.services.coach_models import (
    ChatMessage,
    DailyTargetsParams,
    MoodSnapshot,
    NutritionAdviceParams,
    WorkoutPlanParams,
)


class WorkoutPlanRequest(WorkoutPlanParams):
    mood: Optional[MoodSnapshot] = Field(default=None, description="Today's wearable mood snapshot, if any.")


class DailyTargetsRequest(DailyTargetsParams):
    mood: Optional[MoodSnapshot] = None


class NutritionAdviceRequest(NutritionAdviceParams):
    mood: Optional[MoodSnapshot] = None


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1, max_length=50)


class TextReplyResponse(BaseModel):
    reply: str
    request_id: str
