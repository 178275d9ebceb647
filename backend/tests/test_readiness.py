"""Tests for readiness classification and the provider wrapper."""
from __future__ import annotations

import pytest

from app.services.coach_models import MoodSnapshot, ReadinessContext
from app.services.readiness import (
    calorie_factor,
    classify_mood,
    fetch_readiness,
    readiness_band,
    readiness_from_mood,
    snapshot_provider,
    volume_factor,
    water_bonus_ml,
)


def test_classify_mood_bands() -> None:
    assert classify_mood(MoodSnapshot(mood=5, energy=4, stress=1, sleep=5)) == "high"
    assert classify_mood(MoodSnapshot(mood=4, energy=4, stress=2, sleep=2)) == "low"
    assert classify_mood(MoodSnapshot(mood=3, energy=3, stress=3, sleep=3)) == "medium"
    assert classify_mood(MoodSnapshot(mood=4, energy=4, stress=4, sleep=4)) == "low"


def test_descriptor_carries_scores_and_confidence_label() -> None:
    context = readiness_from_mood(MoodSnapshot(mood=2, energy=3, stress=4, sleep=2, confidence=80))

    assert context.level == "low"
    assert "sleep:2/5" in context.descriptor
    assert "confidence:80 high-confidence" in context.descriptor


def test_absent_context_is_medium() -> None:
    assert readiness_band(None) == "medium"
    assert volume_factor("medium") == 1.0
    assert calorie_factor("medium") == 1.0
    assert water_bonus_ml("medium") == 0


def test_band_factors_follow_direction() -> None:
    assert volume_factor("low") < 1.0 < volume_factor("high")
    assert calorie_factor("low") < 1.0 < calorie_factor("high")
    assert water_bonus_ml("low") > 0


@pytest.mark.asyncio
async def test_fetch_readiness_from_snapshot() -> None:
    provider = snapshot_provider(MoodSnapshot(mood=5, energy=5, stress=1, sleep=5))

    context = await fetch_readiness(provider)

    assert context is not None and context.level == "high"
    assert await fetch_readiness(snapshot_provider(None)) is None
    assert await fetch_readiness(None) is None


@pytest.mark.asyncio
async def test_failing_provider_means_no_context() -> None:
    async def broken_provider():
        raise RuntimeError("wearable sync failed")

    assert await fetch_readiness(broken_provider) is None


@pytest.mark.asyncio
async def test_unexpected_provider_value_is_ignored() -> None:
    async def odd_provider():
        return {"level": "high"}

    async def good_provider():
        return ReadinessContext(level="low")

    assert await fetch_readiness(odd_provider) is None
    assert (await fetch_readiness(good_provider)).level == "low"
