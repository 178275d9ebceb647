"""Error taxonomy for the coach generation pipeline."""
from __future__ import annotations

from enum import Enum


class GatewayErrorKind(str, Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    MALFORMED_ENVELOPE = "malformed_envelope"


class GatewayError(Exception):
    """Transport-class failure raised once the gateway has exhausted its retries."""

    def __init__(self, kind: GatewayErrorKind, message: str, attempts: int = 1):
        self.kind = kind
        self.message = message
        self.attempts = attempts
        super().__init__(f"{kind.value}: {message}")


class InvalidContentError(Exception):
    """A well-formed completion whose content cannot be trusted."""

    def __init__(self, variant: str, fields: list[str] | None = None):
        self.variant = variant
        self.fields = sorted(fields or [])
        detail = ", ".join(self.fields) or "unparsable payload"
        super().__init__(f"{variant}: invalid {detail}")
