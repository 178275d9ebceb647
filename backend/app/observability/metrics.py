"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from app.observability.tracing import trace

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short Opik trace; no-op when Opik is disabled."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        with trace(f"metric:{name}", metadata=payload):
            pass
    except Exception as exc:  # pragma: no cover - defensive
        logger.debug("Unable to record metric %s: %s", name, exc)


@contextmanager
def timed_metric(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
    """Log ``<name>.latency_ms`` when the block exits, successful or not.

    The yielded dict can be extended inside the block to enrich the metric.
    """
    extra: Dict[str, Any] = dict(metadata or {})
    start = perf_counter()
    try:
        yield extra
    finally:
        log_metric(f"{name}.latency_ms", (perf_counter() - start) * 1000, extra)
