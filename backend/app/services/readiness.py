"""Readiness classification and the adjustment bands shared by prompts and fallbacks."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from app.services.coach_models import MoodSnapshot, ReadinessContext

logger = logging.getLogger(__name__)

ReadinessProvider = Callable[[], Awaitable[Optional[ReadinessContext]]]

DEFAULT_BAND = "medium"

# Percent ranges (low, high) stated to the endpoint. Fallbacks use the midpoint.
VOLUME_BAND_PCT: Dict[str, Tuple[int, int]] = {
    "low": (-40, -20),
    "medium": (0, 0),
    "high": (10, 20),
}
CALORIE_BAND_PCT: Dict[str, Tuple[int, int]] = {
    "low": (-20, -10),
    "medium": (0, 0),
    "high": (10, 20),
}
# Extra fluids on low-readiness days.
WATER_BONUS_ML: Dict[str, Tuple[int, int]] = {
    "low": (250, 500),
    "medium": (0, 0),
    "high": (0, 0),
}


def readiness_band(context: Optional[ReadinessContext]) -> str:
    """Absent context counts as medium."""
    if context is None:
        return DEFAULT_BAND
    return context.level


def band_factor(bands: Dict[str, Tuple[int, int]], band: str) -> float:
    low, high = bands.get(band, bands[DEFAULT_BAND])
    return 1 + ((low + high) / 2) / 100


def volume_factor(band: str) -> float:
    return band_factor(VOLUME_BAND_PCT, band)


def calorie_factor(band: str) -> float:
    return band_factor(CALORIE_BAND_PCT, band)


def water_bonus_ml(band: str) -> int:
    return WATER_BONUS_ML.get(band, WATER_BONUS_ML[DEFAULT_BAND])[1]


def confidence_label(confidence: int) -> str:
    if confidence >= 70:
        return "high-confidence"
    if confidence >= 40:
        return "medium-confidence"
    return "low-confidence"


def classify_mood(snapshot: MoodSnapshot) -> str:
    """High needs every signal good; any single poor signal makes it low."""
    if snapshot.mood >= 4 and snapshot.energy >= 4 and snapshot.stress <= 2 and snapshot.sleep >= 4:
        return "high"
    if snapshot.mood <= 2 or snapshot.energy <= 2 or snapshot.sleep <= 2 or snapshot.stress >= 4:
        return "low"
    return "medium"


def readiness_from_mood(snapshot: MoodSnapshot) -> ReadinessContext:
    descriptor = (
        f"mood:{snapshot.mood}/5, energy:{snapshot.energy}/5, stress:{snapshot.stress}/5, "
        f"sleep:{snapshot.sleep}/5, confidence:{snapshot.confidence} {confidence_label(snapshot.confidence)}"
    )
    return ReadinessContext(level=classify_mood(snapshot), descriptor=descriptor)


async def no_readiness() -> Optional[ReadinessContext]:
    return None


def snapshot_provider(snapshot: Optional[MoodSnapshot]) -> ReadinessProvider:
    """Wrap an already-collected mood snapshot as a readiness provider."""
    if snapshot is None:
        return no_readiness

    context = readiness_from_mood(snapshot)

    async def _provider() -> Optional[ReadinessContext]:
        return context

    return _provider


async def fetch_readiness(provider: Optional[ReadinessProvider]) -> Optional[ReadinessContext]:
    """Call the provider; any failure or unexpected value means no context."""
    if provider is None:
        return None
    try:
        context = await provider()
    except Exception as exc:
        logger.warning("Readiness provider failed; continuing without context: %s", exc)
        return None
    if context is not None and not isinstance(context, ReadinessContext):
        logger.warning("Readiness provider returned %s; ignoring.", type(context).__name__)
        return None
    return context
