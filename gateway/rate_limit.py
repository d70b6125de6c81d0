"""Per-client fixed-window rate limiting with Redis primary and in-memory fallback."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Protocol

import redis
from fastapi import Depends, Request

from .config import settings
from .errors import GatewayError

logger = logging.getLogger(__name__)


class RateLimitBackend(Protocol):
    def hit(self, key: str, window: int) -> int:
        """Count one request for ``key`` and return the total within the current window."""
        ...


@dataclass
class RedisRateLimiter:
    client: redis.Redis

    def hit(self, key: str, window: int) -> int:
        bucket = f"ratelimit:{key}:{int(time.time() // window)}"
        pipe = self.client.pipeline()
        pipe.incr(bucket)
        pipe.expire(bucket, window)
        count, _ = pipe.execute()
        return int(count)


class InMemoryRateLimiter:
    def __init__(self) -> None:
        self._windows: Dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window: int) -> int:
        now = time.time()
        with self._lock:
            expired = [k for k, (started, _) in self._windows.items() if now - started >= window]
            for stale in expired:
                del self._windows[stale]
            started, count = self._windows.get(key, (now, 0))
            count += 1
            self._windows[key] = (started, count)
            return count


_limiter: RateLimitBackend | None = None


def get_rate_limiter() -> RateLimitBackend:
    global _limiter
    if _limiter is not None:
        return _limiter
    try:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, socket_connect_timeout=1)
        client.ping()
        logger.info("Using Redis rate limiter at %s:%s", settings.redis_host, settings.redis_port)
        _limiter = RedisRateLimiter(client)
    except redis.RedisError:
        logger.warning("Redis not available, using in-memory rate limiter")
        _limiter = InMemoryRateLimiter()
    return _limiter


class TooManyRequests(GatewayError):
    status_code = 429


def enforce_limit(backend: RateLimitBackend, client_key: str, limit: int, window: int) -> None:
    try:
        count = backend.hit(f"ai-search:{client_key}", window)
    except redis.RedisError as exc:  # pragma: no cover - protective
        logger.warning("Rate limiter unavailable, letting request through: %s", exc)
        return
    if count > limit:
        logger.warning("Rate limit exceeded for IP: %s", client_key)
        raise TooManyRequests(
            "Too many requests",
            f"You can only make {limit} AI search requests per minute. Please wait and try again.",
        )


def ai_search_rate_limit(request: Request, limiter: RateLimitBackend = Depends(get_rate_limiter)) -> None:
    """FastAPI dependency guarding the AI search route."""
    client_key = request.client.host if request.client else "unknown"
    enforce_limit(
        limiter,
        client_key,
        settings.ai_search_rate_limit,
        settings.ai_search_rate_window_seconds,
    )
