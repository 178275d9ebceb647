"""Reward ledger factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from app.core.config import settings
from app.services.rewards.base import RewardLedger
from app.services.rewards.noop import NoopRewardLedger

logger = logging.getLogger(__name__)


@lru_cache
def get_reward_ledger() -> RewardLedger:
    provider = settings.reward_ledger_provider.lower()
    if provider != "noop":
        logger.warning("Unknown reward ledger provider %r; using noop.", provider)
    return NoopRewardLedger()
