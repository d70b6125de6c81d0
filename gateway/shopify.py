"""Shopify Admin API client (GraphQL and REST).

Transport failures are wrapped into :class:`UpstreamError` here so that route
handlers only ever deal with gateway errors.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

# Variants are not paginated; products with more than this many are truncated.
VARIANTS_PER_PRODUCT = 100

PRODUCTS_QUERY = """
query CatalogPage($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    edges {
      cursor
      node {
        id handle title vendor tags description status productType
        images(first: 1) { edges { node { url } } }
        priceRangeV2 { minVariantPrice { amount currencyCode } }
        variants(first: 100) {
          edges { node { id title price sku inventoryQuantity availableForSale } }
          pageInfo { hasNextPage }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id key value namespace type }
    userErrors { field message code }
  }
}
"""


def customer_gid(customer_id: str | int) -> str:
    return f"gid://shopify/Customer/{customer_id}"


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"{exc.response.status_code} {exc.response.reason_phrase}: {exc.response.text[:500]}"
    return str(exc) or exc.__class__.__name__


class ShopifyClient:
    def __init__(
        self,
        store: str = settings.shopify_store,
        token: str = settings.shopify_admin_token,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=f"https://{store}/admin/api",
            headers={"Content-Type": "application/json", "X-Shopify-Access-Token": token},
            timeout=30.0,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Shopify %s %s failed: %s", method, path, _describe(exc))
            raise UpstreamError("Shopify request failed", _describe(exc)) from exc
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Shopify %s %s returned a non-JSON body", method, path)
            raise UpstreamError("Shopify request failed", "Response body is not valid JSON") from exc

    # --- GraphQL ---

    async def graphql(self, query: str, variables: Optional[dict] = None) -> Dict[str, Any]:
        """POST a GraphQL document and return the raw ``{data, errors}`` body."""
        return await self._request(
            "POST",
            f"/{settings.shopify_graphql_version}/graphql.json",
            json={"query": query, "variables": variables or {}},
        )

    async def products_page(self, first: int, after: Optional[str] = None) -> Dict[str, Any]:
        body = await self.graphql(PRODUCTS_QUERY, {"first": first, "after": after})
        if body.get("errors"):
            raise UpstreamError("GraphQL errors occurred", body["errors"], status_code=502)
        return body["data"]["products"]

    async def set_metafields(self, metafields: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Run ``metafieldsSet``; GraphQL errors and user errors are checked separately."""
        body = await self.graphql(METAFIELDS_SET_MUTATION, {"metafields": metafields})
        if body.get("errors"):
            logger.error("GraphQL errors: %s", body["errors"])
            raise UpstreamError("GraphQL errors occurred", body["errors"], status_code=400)
        result = (body.get("data") or {}).get("metafieldsSet") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            logger.error("User errors: %s", user_errors)
            raise UpstreamError("Metafield validation errors", user_errors, status_code=400)
        return result.get("metafields") or []

    # --- REST ---

    def _rest(self, path: str) -> str:
        return f"/{settings.shopify_rest_version}{path}"

    async def find_customer_metafield(
        self, customer_id: str | int, key: str, namespace: str = "custom"
    ) -> Optional[Dict[str, Any]]:
        body = await self._request(
            "GET",
            self._rest(f"/customers/{customer_id}/metafields.json"),
            params={"namespace": namespace, "key": key},
        )
        metafields = body.get("metafields") or []
        return metafields[0] if metafields else None

    async def create_customer_metafield(self, customer_id: str | int, metafield: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._request(
            "POST", self._rest(f"/customers/{customer_id}/metafields.json"), json={"metafield": metafield}
        )
        return body.get("metafield") or {}

    async def update_metafield(self, metafield_id: str | int, metafield: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._request("PUT", self._rest(f"/metafields/{metafield_id}.json"), json={"metafield": metafield})
        return body.get("metafield") or {}

    async def delete_metafield(self, metafield_id: str | int) -> None:
        await self._request("DELETE", self._rest(f"/metafields/{metafield_id}.json"))

    async def get_product(self, product_id: str | int) -> Dict[str, Any]:
        body = await self._request("GET", self._rest(f"/products/{product_id}.json"))
        return body.get("product") or {}

    async def get_product_metafields(self, product_id: str | int) -> List[Dict[str, Any]]:
        body = await self._request("GET", self._rest(f"/products/{product_id}/metafields.json"))
        return body.get("metafields") or []
