"""Customer metafield upsert via the Shopify GraphQL ``metafieldsSet`` mutation."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_shopify
from ..errors import UpstreamError
from ..models import CustomerMetafieldsRequest
from ..shopify import ShopifyClient, customer_gid
from ..validation import require_fields, validate_numeric_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/update-customer-metafields", tags=["metafields"])


def build_customer_metafields(body: CustomerMetafieldsRequest, customer_id: str) -> list[dict]:
    owner = customer_gid(customer_id)
    values = [
        ("name", "single_line_text_field", body.customer_name),
        ("business_name", "single_line_text_field", body.business_name or ""),
        ("role", "single_line_text_field", body.customer_role),
        ("phone", "number_integer", str(body.customer_phone) if body.customer_phone else ""),
    ]
    return [
        {"ownerId": owner, "namespace": "custom", "key": key, "type": type_, "value": value}
        for key, type_, value in values
    ]


@router.post("")
async def update_customer_metafields(
    body: CustomerMetafieldsRequest,
    shopify: ShopifyClient = Depends(get_shopify),
) -> dict:
    require_fields(body.model_dump(), ["customerId", "customer_name", "customer_role"])
    customer_id = validate_numeric_id(body.customerId)

    try:
        metafields = await shopify.set_metafields(build_customer_metafields(body, customer_id))
    except UpstreamError as exc:
        if exc.status_code == 400:
            raise
        raise UpstreamError("Failed to update metafields", exc.details) from exc

    logger.info("Updated metafields for customer %s", customer_id)
    return {
        "success": True,
        "data": metafields,
        "message": "Customer metafields updated successfully",
    }
