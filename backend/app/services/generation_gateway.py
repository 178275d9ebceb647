"""Network gateway to the text-generation endpoint: per-attempt timeout plus bounded retry."""
from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from app.core.config import settings
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.coach_errors import GatewayError, GatewayErrorKind
from app.services.coach_models import GenerationRequest

logger = logging.getLogger(__name__)

Transport = Callable[[List[Dict[str, str]]], Awaitable[Any]]

DEFAULT_MAX_RETRIES = 1


class HttpxTransport:
    """POST ``{"messages": [...]}`` and return the decoded JSON body.

    A client created per call is closed on exit, including when the attempt is
    cancelled by the gateway timeout, so abandoned requests never hold sockets.
    """

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None, headers: Optional[Dict[str, str]] = None):
        self.url = url
        self._client = client
        self._headers = headers or {"Content-Type": "application/json"}

    async def __call__(self, messages: List[Dict[str, str]]) -> Any:
        if self._client is not None:
            return await self._post(self._client, messages)
        async with httpx.AsyncClient(timeout=None) as client:
            return await self._post(client, messages)

    async def _post(self, client: httpx.AsyncClient, messages: List[Dict[str, str]]) -> Any:
        response = await client.post(self.url, json={"messages": messages}, headers=self._headers)
        if response.is_error:
            raise GatewayError(GatewayErrorKind.TRANSPORT, f"endpoint returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "response body is not JSON") from exc


def _completion_from(body: Any) -> str:
    if isinstance(body, dict) and isinstance(body.get("completion"), str):
        return body["completion"]
    raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "response is missing a string 'completion'")


class GenerationGateway:
    """The only component that performs network I/O for coach intents."""

    def __init__(self, transport: Optional[Transport] = None, backoff_ms: Optional[int] = None):
        self._transport: Transport = transport or HttpxTransport(settings.generation_endpoint_url)
        self._backoff_seconds = (settings.generation_backoff_ms if backoff_ms is None else backoff_ms) / 1000

    async def send(
        self,
        request: GenerationRequest,
        timeout_ms: int,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> str:
        """Return the raw completion text or raise GatewayError after ``max_retries + 1`` attempts."""
        attempts = max(0, max_retries) + 1
        payload = request.as_payload()
        attempt = 0

        while True:
            attempt += 1
            try:
                completion = await self._attempt(payload, attempt, timeout_ms)
            except GatewayError as error:
                logger.warning(
                    "Generation attempt %s/%s failed (%s): %s",
                    attempt,
                    attempts,
                    error.kind.value,
                    error.message,
                )
                log_metric("generation.attempt.failure", 1, {"attempt": attempt, "kind": error.kind.value})
                if attempt >= attempts:
                    error.attempts = attempts
                    raise
                await asyncio.sleep(self._backoff_seconds)
            else:
                log_metric("generation.attempt.success", 1, {"attempt": attempt})
                return completion

    async def _attempt(self, payload: List[Dict[str, str]], attempt: int, timeout_ms: int) -> str:
        """One timed transport call; every failure surfaces as GatewayError."""
        with trace("generation.attempt", metadata={"attempt": attempt, "timeout_ms": timeout_ms}):
            try:
                body = await asyncio.wait_for(self._transport(payload), timeout=timeout_ms / 1000)
            except asyncio.TimeoutError as exc:
                raise GatewayError(GatewayErrorKind.TIMEOUT, f"no response within {timeout_ms}ms") from exc
            except GatewayError:
                raise
            except httpx.TimeoutException as exc:
                raise GatewayError(GatewayErrorKind.TIMEOUT, str(exc) or "transport timeout") from exc
            except Exception as exc:
                raise GatewayError(GatewayErrorKind.TRANSPORT, f"{type(exc).__name__}: {exc}") from exc
            return _completion_from(body)


@lru_cache
def get_generation_gateway() -> GenerationGateway:
    """Return the process-wide gateway bound to the configured endpoint."""
    return GenerationGateway()
