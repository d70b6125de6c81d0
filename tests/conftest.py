"""Shared fixtures and upstream fakes."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from gateway.shopify import ShopifyClient

STORE = "test-store.myshopify.com"
IMAGE = "https://cdn.shopify.com/s/files/red.jpg"


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def product_node(
    title: str,
    *,
    gid: Optional[str] = None,
    variants: Optional[List[str]] = None,
    image: Optional[str] = IMAGE,
    price: str = "49.00",
    description: str = "",
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    gid = gid or f"gid://shopify/Product/{title.lower().replace(' ', '-')}"
    variant_edges = [
        {
            "node": {
                "id": f"{gid.replace('Product', 'ProductVariant')}{idx}",
                "title": name,
                "price": price,
                "sku": f"SKU-{idx}",
                "inventoryQuantity": 3,
                "availableForSale": True,
            }
        }
        for idx, name in enumerate(variants or [])
    ]
    return {
        "id": gid,
        "handle": title.lower().replace(" ", "-"),
        "title": title,
        "vendor": "Acme",
        "tags": tags or ["shoes"],
        "description": description,
        "status": "ACTIVE",
        "productType": "Footwear",
        "images": {"edges": [{"node": {"url": image}}]} if image else {"edges": []},
        "priceRangeV2": {"minVariantPrice": {"amount": price, "currencyCode": "USD"}},
        "variants": {"edges": variant_edges},
    }


def graphql_page(nodes: List[dict], *, has_next: bool = False, cursor: Optional[str] = None) -> dict:
    return {
        "data": {
            "products": {
                "edges": [{"node": node, "cursor": node["id"]} for node in nodes],
                "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
            }
        }
    }


class CatalogUpstream:
    """Serves pre-built catalog pages keyed by the ``after`` cursor."""

    def __init__(self, pages: Dict[Optional[str], Any]) -> None:
        self.pages = pages
        self.requests: List[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body["variables"])
        page = self.pages[body["variables"].get("after")]
        if isinstance(page, httpx.Response):
            return page
        return httpx.Response(200, json=page)


def make_shopify(handler: Callable[[httpx.Request], httpx.Response]) -> ShopifyClient:
    return ShopifyClient(STORE, "shpat_test", transport=httpx.MockTransport(handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
