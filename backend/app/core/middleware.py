"""Custom FastAPI middleware."""
from __future__ import annotations

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import bind_request_id

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind the inbound (or a fresh) request id for the lifetime of the request."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        with bind_request_id(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            request.state.request_id = request_id
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
