"""No-op reward ledger (logs only)."""
from __future__ import annotations

import logging

from app.services.coach_models import RewardEvent
from app.services.rewards.base import RewardLedger


logger = logging.getLogger(__name__)


class NoopRewardLedger(RewardLedger):
    def record(self, event: RewardEvent) -> None:
        logger.info(
            "Reward recorded (noop) category=%s amount=%s date=%s id=%s",
            event.category,
            event.base_amount,
            event.date,
            event.id,
        )
        return None
