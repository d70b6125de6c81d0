"""AI search orchestration on top of the catalog and result caches."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict

from .cache import SearchCache, normalize_query
from .catalog import CatalogFetcher
from .errors import GatewayError, InvalidRequest, RateLimitedError
from .matcher import AIMatchResolver

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    def __init__(self, cache: SearchCache, catalog: CatalogFetcher, resolver: AIMatchResolver) -> None:
        self.cache = cache
        self.catalog = catalog
        self.resolver = resolver

    async def search(self, raw_query: str | None) -> Dict[str, Any]:
        if not raw_query or not raw_query.strip():
            raise InvalidRequest("missing_query", "Missing query", "query is a required field")

        cache_key = normalize_query(raw_query)
        cache_start = perf_counter()
        cached = self.cache.get_result(cache_key)
        if cached is not None:
            cache_age = int(self.cache.clock() - cached.timestamp)
            logger.info(
                "timing: total=%.2fms cache_hit=1 q=%r age=%ss",
                (perf_counter() - cache_start) * 1000,
                cache_key,
                cache_age,
            )
            return {**cached.payload, "query": raw_query, "cached": True, "cacheAge": cache_age}

        try:
            payload = await self._run(raw_query, cache_key)
        except (InvalidRequest, RateLimitedError):
            raise
        except Exception as exc:
            logger.error("AI search failed q=%r: %s", cache_key, exc)
            raise GatewayError("Something went wrong!", str(exc)) from exc
        return {**payload, "cached": False}

    async def _run(self, raw_query: str, cache_key: str) -> Dict[str, Any]:
        t0 = perf_counter()
        catalog = await self.catalog.get_catalog()
        t1 = perf_counter()
        titles = await self.resolver.resolve(raw_query, catalog)
        t2 = perf_counter()

        matches = [
            capsule.model_dump(mode="json")
            for capsule in catalog
            if capsule.title in titles and capsule.imageUrl is not None
        ]
        payload = {"matches": matches, "totalProducts": len(catalog), "query": raw_query}
        self.cache.store_result(cache_key, payload)
        t3 = perf_counter()

        logger.info(
            "timing: total=%.2fms catalog=%.2fms ai=%.2fms post=%.2fms q=%r matches=%s catalog_size=%s",
            (t3 - t0) * 1000,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            (t3 - t2) * 1000,
            cache_key,
            len(matches),
            len(catalog),
        )
        return payload
