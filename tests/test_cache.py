"""Freshness and eviction behaviour of the search caches."""

from gateway.cache import SearchCache, normalize_query
from gateway.models import ProductCapsule


def _capsule(title: str) -> ProductCapsule:
    return ProductCapsule(id=f"gid://shopify/Product/{title}", productId=f"gid://shopify/Product/{title}", title=title)


def test_normalize_query_trims_and_lowercases():
    assert normalize_query("  Red Shoes ") == "red shoes"


def test_catalog_is_fresh_until_ttl(clock):
    cache = SearchCache(clock=clock)
    assert cache.fresh_catalog() is None

    cache.store_catalog([_capsule("A")])
    clock.advance(599)
    assert cache.fresh_catalog() is not None

    clock.advance(1)
    assert cache.fresh_catalog() is None


def test_store_catalog_replaces_snapshot(clock):
    cache = SearchCache(clock=clock)
    cache.store_catalog([_capsule("A"), _capsule("B")])
    cache.store_catalog([_capsule("C")])

    assert [c.title for c in cache.fresh_catalog().capsules] == ["C"]


def test_result_expires_after_five_minutes(clock):
    cache = SearchCache(clock=clock)
    cache.store_result("red shoes", {"matches": []})

    clock.advance(299)
    assert cache.get_result("red shoes").payload == {"matches": []}
    clock.advance(1)
    assert cache.get_result("red shoes") is None


def test_hundred_entries_are_not_evicted(clock):
    cache = SearchCache(clock=clock)
    for idx in range(100):
        clock.advance(1)
        cache.store_result(f"q{idx}", {"n": idx})

    assert len(cache.results) == 100


def test_hundred_and_first_entry_evicts_twenty_oldest(clock):
    cache = SearchCache(clock=clock)
    # Insert in an order where insertion order and timestamp order differ.
    timestamps = {f"q{idx}": 1000.0 + ((idx * 37) % 101) for idx in range(101)}
    for key, ts in timestamps.items():
        clock.now = ts
        cache.store_result(key, {"key": key})

    assert len(cache.results) == 81
    oldest = sorted(timestamps, key=timestamps.get)[:20]
    assert not set(oldest) & set(cache.results)
    assert set(cache.results) == set(timestamps) - set(oldest)
