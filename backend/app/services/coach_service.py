"""Public coach intents: compose, generate, normalize, fall back, then reward."""
from __future__ import annotations

import logging
from typing import List, Optional

from app.core.config import settings
from app.observability.metrics import log_metric, timed_metric
from app.observability.tracing import annotate, trace
from app.services.coach_errors import GatewayError, InvalidContentError
from app.services.coach_models import (
    ChatMessage,
    DailyNutritionTargets,
    DailyTargetsParams,
    MacroSplit,
    MacroSplitParams,
    NutritionAdviceParams,
    WorkoutPlan,
    WorkoutPlanParams,
)
from app.services.fallback_computer import (
    compute_macro_split,
    fallback_daily_targets,
    fallback_nutrition_advice,
    fallback_workout_plan,
)
from app.services.generation_gateway import GenerationGateway, get_generation_gateway
from app.services.prompt_composer import (
    compose_chat_request,
    compose_daily_targets_request,
    compose_macro_split_request,
    compose_nutrition_advice_request,
    compose_workout_request,
)
from app.services.readiness import ReadinessProvider, fetch_readiness, readiness_band
from app.services.response_normalizer import (
    STRICT_MACRO_FIELDS,
    STRICT_NUTRITION_FIELDS,
    WorkoutDefaults,
    normalize_daily_targets,
    normalize_macro_split,
    normalize_workout_plan,
)
from app.services.reward_calculator import compute_reward
from app.services.rewards.base import RewardLedger
from app.services.rewards.factory import get_reward_ledger
from app.services.rewards.hooks import dispatch_reward

logger = logging.getLogger(__name__)

CHAT_FALLBACK_REPLY = "I'm having trouble reaching your coach right now. Please try again in a moment."


def _record_source(intent: str, source: str, reason: Optional[str] = None) -> None:
    metadata = {"intent": intent, "source": source}
    if reason:
        metadata["reason"] = reason
    log_metric("coach.result", 1, metadata)
    if source == "fallback":
        logger.warning("Coach %s served from fallback (%s)", intent, reason or "unknown")


async def generate_workout_plan(
    params: WorkoutPlanParams,
    *,
    gateway: Optional[GenerationGateway] = None,
    readiness_provider: Optional[ReadinessProvider] = None,
    reward_ledger: Optional[RewardLedger] = None,
) -> WorkoutPlan:
    """Build a workout plan; missing fields are defaulted in place, gateway failures fall back."""
    gateway = gateway or get_generation_gateway()
    readiness = await fetch_readiness(readiness_provider)
    band = readiness_band(readiness)

    with trace("coach.workout_plan", metadata={"level": params.fitness_level, "readiness": band}) as coach_trace:
        with timed_metric("coach.workout_plan", {"readiness": band}) as metric:
            try:
                raw = await gateway.send(
                    compose_workout_request(params, readiness),
                    timeout_ms=settings.workout_timeout_ms,
                    max_retries=settings.workout_max_retries,
                )
            except GatewayError as exc:
                plan = fallback_workout_plan(params, readiness)
                metric["source"] = "fallback"
                _record_source("workout_plan", "fallback", exc.kind.value)
            else:
                normalized = normalize_workout_plan(
                    raw,
                    WorkoutDefaults(
                        difficulty=params.fitness_level,
                        duration_minutes=params.duration_minutes,
                        equipment=tuple(params.equipment),
                    ),
                )
                plan = normalized.value
                metric["source"] = "remote"
                if normalized.defaulted:
                    logger.info("Workout plan defaulted fields: %s", ", ".join(sorted(normalized.defaulted)))
                _record_source("workout_plan", "remote")
        annotate(coach_trace, plan_name=plan.name, exercises=len(plan.exercises), source=metric["source"])

    dispatch_reward(reward_ledger or get_reward_ledger(), compute_reward(plan, "workout_plan", readiness_band=band))
    return plan


async def get_daily_targets(
    params: DailyTargetsParams,
    *,
    gateway: Optional[GenerationGateway] = None,
    readiness_provider: Optional[ReadinessProvider] = None,
    reward_ledger: Optional[RewardLedger] = None,
) -> DailyNutritionTargets:
    """Daily targets; any invalid macro number discards the remote answer."""
    gateway = gateway or get_generation_gateway()
    readiness = await fetch_readiness(readiness_provider)
    band = readiness_band(readiness)

    with trace("coach.daily_targets", metadata={"readiness": band}):
        with timed_metric("coach.daily_targets", {"readiness": band}) as metric:
            try:
                raw = await gateway.send(
                    compose_daily_targets_request(params, readiness),
                    timeout_ms=settings.targets_timeout_ms,
                    max_retries=settings.targets_max_retries,
                )
                normalized = normalize_daily_targets(raw)
                if normalized.defaulted_any(STRICT_NUTRITION_FIELDS):
                    raise InvalidContentError("daily_targets", list(normalized.defaulted & STRICT_NUTRITION_FIELDS))
                targets = normalized.value
                metric["source"] = "remote"
                _record_source("daily_targets", "remote")
            except (GatewayError, InvalidContentError) as exc:
                targets = fallback_daily_targets(params, readiness)
                metric["source"] = "fallback"
                _record_source("daily_targets", "fallback", str(exc))

    dispatch_reward(reward_ledger or get_reward_ledger(), compute_reward(targets, "daily_targets", readiness_band=band))
    return targets


async def get_macro_split(
    params: MacroSplitParams,
    *,
    gateway: Optional[GenerationGateway] = None,
    reward_ledger: Optional[RewardLedger] = None,
) -> MacroSplit:
    """Gram targets for a named preset; the preset math is the offline answer."""
    gateway = gateway or get_generation_gateway()

    with trace("coach.macro_split", metadata={"preset": params.preset}):
        with timed_metric("coach.macro_split", {"preset": params.preset}) as metric:
            try:
                raw = await gateway.send(
                    compose_macro_split_request(params),
                    timeout_ms=settings.macro_timeout_ms,
                    max_retries=settings.macro_max_retries,
                )
                normalized = normalize_macro_split(raw)
                if normalized.defaulted_any(STRICT_MACRO_FIELDS):
                    raise InvalidContentError("macro_split", list(normalized.defaulted & STRICT_MACRO_FIELDS))
                split = normalized.value
                metric["source"] = "remote"
                _record_source("macro_split", "remote")
            except (GatewayError, InvalidContentError) as exc:
                split = compute_macro_split(params.preset, params.calories)
                metric["source"] = "fallback"
                _record_source("macro_split", "fallback", str(exc))

    dispatch_reward(reward_ledger or get_reward_ledger(), compute_reward(split, "macro_split"))
    return split


async def get_nutrition_advice(
    params: NutritionAdviceParams,
    *,
    gateway: Optional[GenerationGateway] = None,
    readiness_provider: Optional[ReadinessProvider] = None,
    reward_ledger: Optional[RewardLedger] = None,
) -> str:
    """Free-text advice for today; offline advice is rendered from the fallback targets."""
    gateway = gateway or get_generation_gateway()
    readiness = await fetch_readiness(readiness_provider)
    band = readiness_band(readiness)

    with trace("coach.nutrition_advice", metadata={"readiness": band}):
        try:
            raw = await gateway.send(
                compose_nutrition_advice_request(params, readiness),
                timeout_ms=settings.advice_timeout_ms,
                max_retries=settings.advice_max_retries,
            )
            advice = raw.strip()
            if not advice:
                raise InvalidContentError("nutrition_advice")
            _record_source("nutrition_advice", "remote")
        except (GatewayError, InvalidContentError) as exc:
            advice = fallback_nutrition_advice(params, readiness)
            _record_source("nutrition_advice", "fallback", str(exc))

    dispatch_reward(reward_ledger or get_reward_ledger(), compute_reward(advice, "nutrition_advice", readiness_band=band))
    return advice


async def chat(messages: List[ChatMessage], *, gateway: Optional[GenerationGateway] = None) -> str:
    """Relay an ad-hoc conversation; never raises for endpoint failures."""
    gateway = gateway or get_generation_gateway()
    request = compose_chat_request(messages)
    with trace("coach.chat", metadata={"turns": len(messages)}):
        try:
            reply = await gateway.send(
                request,
                timeout_ms=settings.chat_timeout_ms,
                max_retries=settings.chat_max_retries,
            )
        except GatewayError as exc:
            _record_source("chat", "fallback", exc.kind.value)
            return CHAT_FALLBACK_REPLY
    _record_source("chat", "remote")
    return reply.strip() or CHAT_FALLBACK_REPLY
