"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib

from app.core.context import bind_request_id, get_request_id
from app.observability import tracing


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import app.core.config as core_config
    import app.observability.client as client_module
    import app.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")
    assert client_module.get_opik_client() is None


def test_trace_is_a_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("coach.macro_split", metadata={"preset": "keto"}) as opik_trace:
        tracing.annotate(opik_trace, source="fallback")

    assert opik_trace is None


def test_bind_request_id_restores_previous_value() -> None:
    assert get_request_id() is None

    with bind_request_id("outer") as outer:
        with bind_request_id() as inner:
            assert inner == outer == "outer"
        with bind_request_id("job-7"):
            assert get_request_id() == "job-7"
        assert get_request_id() == "outer"

    assert get_request_id() is None
