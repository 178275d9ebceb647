"""Tests for generation request composition."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.services.coach_models import (
    ChatMessage,
    DailyTargetsParams,
    MacroSplitParams,
    NutritionAdviceParams,
    ReadinessContext,
    WorkoutPlanParams,
)
from app.services.prompt_composer import (
    compose_chat_request,
    compose_daily_targets_request,
    compose_macro_split_request,
    compose_nutrition_advice_request,
    compose_workout_request,
)

LOW = ReadinessContext(level="low", descriptor="sleep:2/5")


def _system_and_user(request):
    roles = [message.role for message in request.messages]
    assert roles == ["system", "user"]
    return request.messages[0].content, request.messages[1].content


def test_workout_request_has_json_contract_and_params() -> None:
    system, user = _system_and_user(
        compose_workout_request(WorkoutPlanParams(fitness_level="advanced", goals=["strength"], duration_minutes=45))
    )

    assert "Respond with ONLY minified JSON matching schema" in system
    assert '"exercises"' in system
    assert "Level: advanced" in user
    assert "Goals: strength" in user
    assert "Duration: 45 minutes" in user
    assert "Equipment: none" in user


def test_workout_request_without_readiness_has_no_recovery_clause() -> None:
    system, user = _system_and_user(compose_workout_request(WorkoutPlanParams()))

    assert "TodayRecovery" not in user
    assert "20-40%" not in system
    assert "DietaryRestrictions" not in user


def test_workout_request_with_low_readiness_states_reduction() -> None:
    system, user = _system_and_user(compose_workout_request(WorkoutPlanParams(), LOW))

    assert "TodayRecovery(readiness:low, sleep:2/5)." in user
    assert "20-40%" in system


def test_default_goals_fill_in_when_goals_empty() -> None:
    _, user = _system_and_user(
        compose_daily_targets_request(DailyTargetsParams(default_goals=["muscle gain"], restrictions=["vegan"]))
    )

    assert "Goals: muscle gain." in user
    assert "Restrictions: vegan." in user


def test_general_fitness_used_when_no_goals_anywhere() -> None:
    _, user = _system_and_user(compose_nutrition_advice_request(NutritionAdviceParams()))

    assert "Goals: general fitness." in user
    assert "Restrictions" not in user


def test_nutrition_readiness_rules_only_with_context() -> None:
    with_context, _ = _system_and_user(compose_daily_targets_request(DailyTargetsParams(), LOW))
    without_context, _ = _system_and_user(compose_daily_targets_request(DailyTargetsParams()))

    assert "10-20%" in with_context and "250-500ml" in with_context
    assert "TodayRecovery" not in without_context


def test_macro_request_lists_preset_ratios() -> None:
    system, user = _system_and_user(compose_macro_split_request(MacroSplitParams(preset="keto", calories=2000)))

    assert "keto 25/5/70" in system
    assert user == "Preset: keto. Calories: 2000."


def test_advice_request_uses_text_contract() -> None:
    system, _ = _system_and_user(compose_nutrition_advice_request(NutritionAdviceParams(goals=["fat loss"])))

    assert "120-180 words" in system
    assert "JSON" not in system


def test_chat_request_passes_transcript_through() -> None:
    messages = [
        ChatMessage(role="system", content="You are a coach."),
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello!"),
        ChatMessage(role="user", content="Plan my week"),
    ]

    request = compose_chat_request(messages)

    assert list(request.messages) == messages


def test_chat_request_rejects_late_system_message() -> None:
    with pytest.raises(ValidationError):
        compose_chat_request(
            [ChatMessage(role="user", content="Hi"), ChatMessage(role="system", content="Be brief.")]
        )
