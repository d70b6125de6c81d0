"""Gemini ``generateContent`` client."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from .config import settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class AIRateLimited(Exception):
    """The AI endpoint answered HTTP 429."""


class GeminiClient:
    def __init__(
        self,
        api_key: str = settings.gemini_api_key,
        model: str = settings.gemini_model,
        *,
        timeout: float = settings.ai_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.model = model
        self._http = httpx.AsyncClient(
            base_url=GEMINI_BASE_URL,
            headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the first candidate's text, or ``"{}"``."""
        try:
            response = await self._http.post(
                f"/models/{self.model}:generateContent",
                json={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError("AI request failed", str(exc) or exc.__class__.__name__) from exc

        if response.status_code == 429:
            raise AIRateLimited(response.text[:200])
        if response.is_error:
            raise UpstreamError(
                "AI request failed",
                f"{response.status_code} {response.reason_phrase}: {response.text[:500]}",
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError("AI request failed", "Response body is not valid JSON") from exc
        candidates = body.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or [{}]
        return parts[0].get("text") or "{}"
