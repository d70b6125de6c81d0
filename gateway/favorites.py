"""Favorite product lists stored as customer metafields.

Two kinds of metafield live in the ``custom`` namespace of a customer:

* ``favList``: JSON array with the names of the customer's lists;
* ``favList_<sanitized name>``: JSON array with the product ids of one list.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import NotFoundError, UpstreamError
from .shopify import ShopifyClient

logger = logging.getLogger(__name__)

NAMESPACE = "custom"
LIST_NAMES_KEY = "favList"
LIST_NAMES_TYPE = "list.single_line_text_field"
LIST_PRODUCTS_TYPE = "json"
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9]")


def list_products_key(list_name: str) -> str:
    return f"{LIST_NAMES_KEY}_{_UNSAFE_KEY_CHARS.sub('_', list_name)}"


def _decode_list(metafield: Optional[Dict[str, Any]]) -> Optional[List[str]]:
    """Decode a metafield's JSON array value; ``None`` when it is not a valid list."""
    if not metafield or not metafield.get("value"):
        return []
    try:
        value = json.loads(metafield["value"])
    except (json.JSONDecodeError, TypeError):
        return None
    if value is None:
        return []
    return value if isinstance(value, list) else None


def format_product(product: Dict[str, Any], metafields: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    variants = product.get("variants") or [{}]
    images = product.get("images") or [{}]
    first_variant = variants[0]
    formatted = {
        "id": product.get("id"),
        "title": product.get("title"),
        "handle": product.get("handle"),
        "vendor": product.get("vendor"),
        "product_code": first_variant.get("sku") or "",
        "featured_image": (product.get("image") or {}).get("src") or images[0].get("src") or "",
        "price": first_variant.get("price") or "0.00",
        "compare_at_price": first_variant.get("compare_at_price"),
        "catalogue_pdf": None,
        "group_catalogue": None,
    }
    for metafield in metafields or []:
        if metafield.get("namespace") != NAMESPACE:
            continue
        if metafield.get("key") in ("catalogue_pdf", "group_catalogue"):
            formatted[metafield["key"]] = metafield.get("value")
    return formatted


class FavoriteLists:
    def __init__(self, shopify: ShopifyClient) -> None:
        self.shopify = shopify

    async def _load(self, customer_id: str, key: str) -> Tuple[Optional[Dict[str, Any]], Optional[List[str]]]:
        metafield = await self.shopify.find_customer_metafield(customer_id, key, NAMESPACE)
        return metafield, _decode_list(metafield)

    async def _save(
        self, customer_id: str, metafield: Optional[Dict[str, Any]], key: str, type_: str, values: List[str]
    ) -> Dict[str, Any]:
        payload = {"namespace": NAMESPACE, "key": key, "value": json.dumps(values), "type": type_}
        if metafield and metafield.get("id"):
            return await self.shopify.update_metafield(metafield["id"], payload)
        return await self.shopify.create_customer_metafield(customer_id, payload)

    async def list_names(self, customer_id: str) -> List[str]:
        _, names = await self._load(customer_id, LIST_NAMES_KEY)
        if names is None:
            raise UpstreamError("Stored list names are not valid JSON")
        return names

    async def add_list(self, customer_id: str, list_name: str) -> Dict[str, Any]:
        metafield, names = await self._load(customer_id, LIST_NAMES_KEY)
        if names is None:
            raise UpstreamError("Stored list names are not valid JSON")
        if list_name in names:
            return {"success": True, "message": "List already exists", "lists": names}
        names.append(list_name)
        saved = await self._save(customer_id, metafield, LIST_NAMES_KEY, LIST_NAMES_TYPE, names)
        logger.info("Added list %r for customer %s", list_name, customer_id)
        return {"success": True, "lists": names, "metafield": saved}

    async def list_products(self, customer_id: str, list_name: str) -> List[Dict[str, Any]]:
        _, product_ids = await self._load(customer_id, list_products_key(list_name))
        if product_ids is None:
            logger.error("Product ids for list %r of customer %s are not valid JSON", list_name, customer_id)
            return []

        products = []
        for product_id in product_ids:
            try:
                product = await self.shopify.get_product(product_id)
            except UpstreamError as exc:
                logger.warning("Could not fetch product %s: %s", product_id, exc)
                continue
            try:
                metafields = await self.shopify.get_product_metafields(product_id)
            except UpstreamError as exc:
                logger.warning("Could not fetch metafields for product %s: %s", product_id, exc)
                metafields = None
            products.append(format_product(product, metafields))
        return products

    async def add_product(self, customer_id: str, list_name: str, product_id: str) -> Dict[str, Any]:
        key = list_products_key(list_name)
        metafield, product_ids = await self._load(customer_id, key)
        product_ids = product_ids or []
        if product_id in product_ids:
            return {"success": True, "message": "Product already in list", "products": product_ids}
        product_ids.append(product_id)
        saved = await self._save(customer_id, metafield, key, LIST_PRODUCTS_TYPE, product_ids)
        return {"success": True, "products": product_ids, "metafield": saved}

    async def remove_product(self, customer_id: str, list_name: str, product_id: str) -> Dict[str, Any]:
        key = list_products_key(list_name)
        metafield, product_ids = await self._load(customer_id, key)
        if metafield is None:
            raise NotFoundError("List not found")
        if product_ids is None:
            raise NotFoundError("List not found or invalid")
        remaining = [pid for pid in product_ids if pid != product_id]
        saved = await self._save(customer_id, metafield, key, LIST_PRODUCTS_TYPE, remaining)
        return {
            "success": True,
            "products": remaining,
            "message": "Product removed from list",
            "metafield": saved,
        }

    async def delete_list(self, customer_id: str, list_name: str) -> Dict[str, Any]:
        names_metafield, names = await self._load(customer_id, LIST_NAMES_KEY)
        if names is None:
            raise UpstreamError("Stored list names are not valid JSON")
        remaining = [name for name in names if name != list_name]
        if names_metafield is not None:
            await self._save(customer_id, names_metafield, LIST_NAMES_KEY, LIST_NAMES_TYPE, remaining)

        products_metafield = await self.shopify.find_customer_metafield(
            customer_id, list_products_key(list_name), NAMESPACE
        )
        if products_metafield and products_metafield.get("id"):
            await self.shopify.delete_metafield(products_metafield["id"])

        logger.info("Deleted list %r for customer %s", list_name, customer_id)
        return {"success": True, "message": "List deleted successfully", "lists": remaining}
