"""Best-effort reward dispatch, run after a coach result is final."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Optional, Set

from app.core.config import settings
from app.observability.metrics import log_metric
from app.services.coach_models import RewardEvent
from app.services.rewards.base import RewardLedger


logger = logging.getLogger(__name__)

# Strong references so scheduled ledger writes are not garbage collected mid-flight.
_pending_writes: Set["asyncio.Future[None]"] = set()


def dispatch_reward(ledger: Optional[RewardLedger], event: RewardEvent) -> str:
    """Hand ``event`` to the ledger without waiting; returns the dispatch status.

    Ledger failures are logged and swallowed so bookkeeping never affects the
    result already returned to the caller.
    """
    if not settings.rewards_enabled or ledger is None:
        log_metric("rewards.skipped", 1, {"category": event.category})
        return "skipped"

    try:
        outcome = ledger.record(event)
    except Exception as exc:
        logger.warning("Reward ledger rejected event %s (%s): %s", event.id, event.category, exc)
        log_metric("rewards.failed", 1, {"category": event.category})
        return "failed"

    if inspect.isawaitable(outcome):
        future = asyncio.ensure_future(outcome)
        _pending_writes.add(future)
        future.add_done_callback(lambda done: _finish_write(done, event))
        return "scheduled"

    log_metric("rewards.recorded", 1, {"category": event.category})
    return "recorded"


def _finish_write(future: "asyncio.Future[None]", event: RewardEvent) -> None:
    _pending_writes.discard(future)
    if future.cancelled():
        logger.warning("Reward write for %s was cancelled", event.id)
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("Async reward ledger failed for %s (%s): %s", event.id, event.category, exc)
        log_metric("rewards.failed", 1, {"category": event.category})
        return
    log_metric("rewards.recorded", 1, {"category": event.category})
