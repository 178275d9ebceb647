"""Tests for metrics helpers."""
from __future__ import annotations

from typing import Any, Dict

import pytest

from app.observability import metrics
from app.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


@pytest.fixture()
def dummy_client(monkeypatch) -> _DummyClient:
    client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: client)
    return client


def test_log_metric_closes_trace(dummy_client) -> None:
    metrics.log_metric("coach.result", 1, metadata={"intent": "macro_split", "source": "fallback"})

    assert dummy_client.traces, "Metric call should record a trace"
    assert dummy_client.traces[0].name == "metric:coach.result"
    assert dummy_client.traces[0].metadata["value"] == 1
    assert dummy_client.traces[0].metadata["source"] == "fallback"
    assert dummy_client.traces[0].ended is True


def test_timed_metric_records_latency_with_block_metadata(dummy_client) -> None:
    with metrics.timed_metric("coach.workout_plan", {"readiness": "low"}) as extra:
        extra["source"] = "remote"

    latency = dummy_client.traces[-1]
    assert latency.name == "metric:coach.workout_plan.latency_ms"
    assert latency.metadata["value"] >= 0
    assert latency.metadata["readiness"] == "low"
    assert latency.metadata["source"] == "remote"


def test_timed_metric_records_latency_when_block_raises(dummy_client) -> None:
    with pytest.raises(RuntimeError):
        with metrics.timed_metric("coach.daily_targets"):
            raise RuntimeError("boom")

    assert dummy_client.traces[-1].name == "metric:coach.daily_targets.latency_ms"
