"""Coach API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.schemas.coach import (
    ChatRequest,
    DailyTargetsRequest,
    NutritionAdviceRequest,
    TextReplyResponse,
    WorkoutPlanRequest,
)
from app.services import coach_service
from app.services.coach_models import (
    DailyNutritionTargets,
    DailyTargetsParams,
    MacroSplit,
    MacroSplitParams,
    NutritionAdviceParams,
    WorkoutPlan,
    WorkoutPlanParams,
)
from app.services.generation_gateway import GenerationGateway, get_generation_gateway
from app.services.readiness import snapshot_provider
from app.services.rewards.base import RewardLedger
from app.services.rewards.factory import get_reward_ledger

router = APIRouter(prefix="/coach", tags=["coach"])


@router.post("/workout-plan", response_model=WorkoutPlan)
async def create_workout_plan(
    payload: WorkoutPlanRequest,
    gateway: GenerationGateway = Depends(get_generation_gateway),
    ledger: RewardLedger = Depends(get_reward_ledger),
) -> WorkoutPlan:
    """Generate a workout plan, falling back to an offline circuit when needed."""
    return await coach_service.generate_workout_plan(
        WorkoutPlanParams(**payload.model_dump(exclude={"mood"})),
        gateway=gateway,
        readiness_provider=snapshot_provider(payload.mood),
        reward_ledger=ledger,
    )


@router.post("/daily-targets", response_model=DailyNutritionTargets)
async def create_daily_targets(
    payload: DailyTargetsRequest,
    gateway: GenerationGateway = Depends(get_generation_gateway),
    ledger: RewardLedger = Depends(get_reward_ledger),
) -> DailyNutritionTargets:
    return await coach_service.get_daily_targets(
        DailyTargetsParams(**payload.model_dump(exclude={"mood"})),
        gateway=gateway,
        readiness_provider=snapshot_provider(payload.mood),
        reward_ledger=ledger,
    )


@router.post("/macro-split", response_model=MacroSplit)
async def create_macro_split(
    payload: MacroSplitParams,
    gateway: GenerationGateway = Depends(get_generation_gateway),
    ledger: RewardLedger = Depends(get_reward_ledger),
) -> MacroSplit:
    return await coach_service.get_macro_split(payload, gateway=gateway, reward_ledger=ledger)


@router.post("/nutrition-advice", response_model=TextReplyResponse)
async def create_nutrition_advice(
    payload: NutritionAdviceRequest,
    http_request: Request,
    gateway: GenerationGateway = Depends(get_generation_gateway),
    ledger: RewardLedger = Depends(get_reward_ledger),
) -> TextReplyResponse:
    advice = await coach_service.get_nutrition_advice(
        NutritionAdviceParams(**payload.model_dump(exclude={"mood"})),
        gateway=gateway,
        readiness_provider=snapshot_provider(payload.mood),
        reward_ledger=ledger,
    )
    return TextReplyResponse(reply=advice, request_id=getattr(http_request.state, "request_id", "") or "")


@router.post("/chat", response_model=TextReplyResponse)
async def chat(
    payload: ChatRequest,
    http_request: Request,
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> TextReplyResponse:
    """Relay a free-form conversation to the generation endpoint."""
    try:
        reply = await coach_service.chat(payload.messages, gateway=gateway)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return TextReplyResponse(reply=reply, request_id=getattr(http_request.state, "request_id", "") or "")
