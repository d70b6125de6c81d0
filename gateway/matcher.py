"""Natural-language product matching via the AI endpoint."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, FrozenSet, Sequence

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import settings
from .errors import RateLimitedError
from .gemini import AIRateLimited, GeminiClient
from .match_parser import parse_matches
from .models import ProductCapsule

logger = logging.getLogger(__name__)

MAX_MATCHES = 5

PROMPT_TEMPLATE = """You are an e-commerce search assistant for a Shopify store.
User query: "{query}"

Available products (title | price | type | vendor | tags | summary | availability):
{catalog}

Rules:
- Return ONLY exact titles from the list above that are strong matches.
- No guessing. If nothing matches, return an empty list.
- Max {limit} items.
- Output must be strictly valid JSON only. No explanations.
Output JSON format: {{ "matches": ["Product A", "Product B"] }}
"""


def _capsule_line(capsule: ProductCapsule) -> str:
    availability = "in stock" if capsule.available else "out of stock"
    return (
        f"- {capsule.title} | {capsule.price} {capsule.currency} | {capsule.productType or '-'} | "
        f"{capsule.vendor or '-'} | Tags: {', '.join(capsule.tags)} | {capsule.summary} | {availability}"
    )


def build_prompt(query: str, catalog: Sequence[ProductCapsule], limit: int = MAX_MATCHES) -> str:
    return PROMPT_TEMPLATE.format(
        query=query,
        catalog="\n".join(_capsule_line(capsule) for capsule in catalog),
        limit=limit,
    )


class AIMatchResolver:
    def __init__(
        self,
        client: GeminiClient,
        *,
        max_attempts: int = settings.ai_max_attempts,
        backoff_seconds: float = settings.ai_backoff_seconds,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep

    async def _generate(self, prompt: str) -> str:
        # Only 429s are retried; anything else escapes on the first attempt.
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds),
            retry=retry_if_exception_type(AIRateLimited),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    raw = await self.client.generate(prompt)
        except AIRateLimited as exc:
            # The last 429 is followed by one more backoff step before giving up.
            await self.sleep(self.backoff_seconds * 2 ** (self.max_attempts - 1))
            logger.error("AI endpoint still rate limited after %s attempts", self.max_attempts)
            raise RateLimitedError(
                "AI service temporarily rate-limited",
                "The AI search service is busy. Please try again shortly.",
            ) from exc
        return raw

    async def resolve(self, query: str, catalog: Sequence[ProductCapsule]) -> FrozenSet[str]:
        prompt = build_prompt(query, catalog)
        raw = await self._generate(prompt)
        titles = parse_matches(raw, limit=MAX_MATCHES)
        logger.debug("ai matches q=%r titles=%s", query, titles)
        return frozenset(titles)
