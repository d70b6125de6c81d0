"""Error types rendered as ``{success: false, error, details}`` responses."""
from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    status_code = 500

    def __init__(self, error: str, details: Any = None, *, status_code: int | None = None) -> None:
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidRequest(GatewayError):
    """Missing or malformed client input. No upstream call is made."""

    status_code = 400

    def __init__(self, code: str, error: str, details: Any = None) -> None:
        super().__init__(error, details)
        self.code = code

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["code"] = self.code
        return payload


class NotFoundError(GatewayError):
    status_code = 404


class UpstreamError(GatewayError):
    """Transport or validation failure reported by a third-party API."""


class RateLimitedError(GatewayError):
    """The AI endpoint kept answering 429 after all retries."""

    status_code = 503
