"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


@contextmanager
def bind_request_id(request_id: str | None = None) -> Iterator[str]:
    """Bind ``request_id`` (or the current or a fresh one) for the enclosed block.

    ``RequestIDMiddleware`` wraps every HTTP request in this.
    """
    value = request_id or get_request_id() or str(uuid4())
    token = request_id_ctx_var.set(value)
    try:
        yield value
    finally:
        request_id_ctx_var.reset(token)
