"""In-process caches for the AI search route.

``SearchCache`` owns two pieces of state: the most recent catalog snapshot and
the per-query result mapping. One instance is created by the application and
handed to the search orchestrator.

There is deliberately no locking. Concurrent requests that find an expired
catalog each refetch it and the last write wins; each write is a single
assignment, so readers always see either the old or the new snapshot.
The result mapping behaves the same way for concurrent identical queries.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from .config import settings
from .models import ProductCapsule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    capsules: Tuple[ProductCapsule, ...]
    fetched_at: float


@dataclass(frozen=True)
class SearchCacheEntry:
    payload: Dict[str, Any]
    timestamp: float


def normalize_query(query: str) -> str:
    return query.strip().lower()


class SearchCache:
    def __init__(
        self,
        *,
        catalog_ttl: float = settings.catalog_cache_ttl_seconds,
        result_ttl: float = settings.search_cache_ttl_seconds,
        max_entries: int = settings.search_cache_max_entries,
        evict_batch: int = settings.search_cache_evict_batch,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.catalog_ttl = catalog_ttl
        self.result_ttl = result_ttl
        self.max_entries = max_entries
        self.evict_batch = evict_batch
        self.clock = clock
        self.catalog: Optional[CatalogSnapshot] = None
        self.results: Dict[str, SearchCacheEntry] = {}

    def fresh_catalog(self) -> Optional[CatalogSnapshot]:
        snapshot = self.catalog
        if snapshot is None:
            return None
        if self.clock() - snapshot.fetched_at >= self.catalog_ttl:
            return None
        return snapshot

    def store_catalog(self, capsules: Sequence[ProductCapsule]) -> CatalogSnapshot:
        snapshot = CatalogSnapshot(capsules=tuple(capsules), fetched_at=self.clock())
        self.catalog = snapshot
        return snapshot

    def get_result(self, key: str) -> Optional[SearchCacheEntry]:
        entry = self.results.get(key)
        if entry is None:
            return None
        if self.clock() - entry.timestamp >= self.result_ttl:
            return None
        return entry

    def store_result(self, key: str, payload: Dict[str, Any]) -> SearchCacheEntry:
        entry = SearchCacheEntry(payload=payload, timestamp=self.clock())
        self.results[key] = entry
        if len(self.results) > self.max_entries:
            self._evict_oldest()
        return entry

    def _evict_oldest(self) -> None:
        oldest = sorted(self.results.items(), key=lambda item: item[1].timestamp)[: self.evict_batch]
        for key, _ in oldest:
            self.results.pop(key, None)
        logger.debug("cache_evict removed=%s remaining=%s", len(oldest), len(self.results))
