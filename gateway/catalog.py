"""Catalog fetching and flattening into product capsules."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from .cache import SearchCache
from .config import settings
from .models import ProductCapsule
from .shopify import VARIANTS_PER_PRODUCT, ShopifyClient

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_TITLE = "Default Title"
SUMMARY_LENGTH = 200


def _edges(connection: Optional[dict]) -> List[dict]:
    return [edge.get("node") or {} for edge in (connection or {}).get("edges", [])]


def flatten_product(node: Dict[str, Any]) -> List[ProductCapsule]:
    """Turn one product node into one capsule per variant (or one if it has none)."""
    images = _edges(node.get("images"))
    image_url = images[0].get("url") if images else None
    min_price = (node.get("priceRangeV2") or {}).get("minVariantPrice") or {}
    description = node.get("description") or ""
    base = {
        "productId": node["id"],
        "handle": node.get("handle"),
        "vendor": node.get("vendor"),
        "tags": tuple(node.get("tags") or ()),
        "productType": node.get("productType"),
        "summary": description[:SUMMARY_LENGTH],
        "imageUrl": image_url,
        "currency": min_price.get("currencyCode"),
        "status": node.get("status"),
    }

    variants = _edges(node.get("variants"))
    if ((node.get("variants") or {}).get("pageInfo") or {}).get("hasNextPage"):
        logger.warning(
            "Product %s has more than %s variants; the rest are not searchable",
            node["id"],
            VARIANTS_PER_PRODUCT,
        )
    if not variants:
        return [
            ProductCapsule(
                id=node["id"],
                title=node.get("title") or "",
                price=min_price.get("amount"),
                **base,
            )
        ]

    capsules = []
    for variant in variants:
        title = node.get("title") or ""
        variant_title = variant.get("title")
        if variant_title and variant_title != DEFAULT_VARIANT_TITLE:
            title = f"{title} - {variant_title}"
        capsules.append(
            ProductCapsule(
                id=variant.get("id") or node["id"],
                title=title,
                price=variant.get("price"),
                sku=variant.get("sku") or "",
                inventory=variant.get("inventoryQuantity"),
                available=bool(variant.get("availableForSale")),
                **base,
            )
        )
    return capsules


class CatalogFetcher:
    def __init__(self, shopify: ShopifyClient, cache: SearchCache, page_size: int = settings.catalog_page_size) -> None:
        self.shopify = shopify
        self.cache = cache
        self.page_size = page_size

    async def get_catalog(self) -> Tuple[ProductCapsule, ...]:
        snapshot = self.cache.fresh_catalog()
        if snapshot is not None:
            logger.debug("catalog cache_hit products=%s", len(snapshot.capsules))
            return snapshot.capsules

        t0 = perf_counter()
        capsules: List[ProductCapsule] = []
        cursor: Optional[str] = None
        pages = 0
        while True:
            try:
                page = await self.shopify.products_page(self.page_size, cursor)
            except Exception:
                # Nothing fetched so far is cached or returned.
                logger.warning("catalog fetch abandoned after %s page(s); discarding partial results", pages)
                raise
            pages += 1
            for node in _edges(page):
                capsules.extend(flatten_product(node))
            page_info = page.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                break

        snapshot = self.cache.store_catalog(capsules)
        logger.info(
            "catalog refreshed pages=%s capsules=%s took=%.2fms",
            pages,
            len(snapshot.capsules),
            (perf_counter() - t0) * 1000,
        )
        return snapshot.capsules
