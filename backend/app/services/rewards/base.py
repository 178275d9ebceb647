"""Reward ledger interface."""
from __future__ import annotations

from typing import Awaitable, Optional

from app.services.coach_models import RewardEvent


class RewardLedger:
    """Write-only sink for reward events.

    ``record`` may return an awaitable; the caller schedules it and never
    waits on the outcome.
    """

    def record(self, event: RewardEvent) -> Optional[Awaitable[None]]:
        raise NotImplementedError
