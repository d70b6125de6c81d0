"""Customer profile records kept in the document store."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..customer_store import MAX_PAGE_SIZE, CustomerQuery, CustomerStore
from ..dependencies import get_customer_store, get_notifier
from ..errors import InvalidRequest, NotFoundError
from ..models import CustomerProfileRequest, VerifyRequest
from ..notifier import Notifier
from ..validation import (
    format_phone,
    require_fields,
    validate_employee_count,
    validate_role,
    validate_website,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])

REQUIRED_PROFILE_FIELDS = (
    "customerId",
    "customer_name",
    "customer_role",
    "country",
    "business_name",
    "number_of_employees",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_customer_record(body: CustomerProfileRequest, contact: str) -> Dict[str, Any]:
    now = _now()
    record: Dict[str, Any] = {
        "customerId": str(body.customerId),
        "customerName": body.customer_name,
        "businessName": body.business_name,
        "role": body.customer_role,
        "contact": contact,
        "email": body.customer_email or "",
        "country": body.country,
        "domain": body.domain_name or "",
        "numberOfEmployees": body.number_of_employees,
        "isVerified": False,
        "createdAt": now,
        "updatedAt": now,
    }
    if body.customer_role == "Buyer" and body.retailer_type:
        record["retailerType"] = body.retailer_type
    if body.customer_role == "Supplier/Vendor":
        if body.supplier_type:
            record["supplierType"] = body.supplier_type
        if body.business_registration:
            record["businessRegistration"] = body.business_registration
    return record


def summarize_customer(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc_id,
        "firstName": data.get("firstName") or "",
        "lastName": data.get("lastName") or "",
        "email": data.get("email") or "",
        "phone": data.get("contact") or "",
        "createdAt": data.get("createdAt") or "",
        "updatedAt": data.get("updatedAt") or "",
        "tags": data.get("tags") or [],
        "customerName": data.get("customerName") or "",
        "businessName": data.get("businessName") or "",
        "role": data.get("role") or "",
        "contact": data.get("contact") or "",
        "isVerified": data.get("isVerified") or False,
        "country": data.get("country") or "",
        "domainName": data.get("domain") or "",
        "numberOfEmployees": data.get("numberOfEmployees") or "",
        "retailerType": data.get("retailerType") or "",
        "supplierType": data.get("supplierType") or "",
        "businessRegistration": data.get("businessRegistration") or "",
    }


@router.post("")
async def upsert_customer(
    body: CustomerProfileRequest,
    store: CustomerStore = Depends(get_customer_store),
    notifier: Notifier = Depends(get_notifier),
) -> dict:
    require_fields(body.model_dump(), REQUIRED_PROFILE_FIELDS)
    validate_role(body.customer_role)
    validate_website(body.domain_name)
    contact = format_phone(body.customer_phone, body.country)
    validate_employee_count(body.number_of_employees)

    record = build_customer_record(body, contact)
    customer_id = record["customerId"]
    exists = await store.get(customer_id) is not None
    if exists:
        del record["createdAt"]
        await store.update(customer_id, record)
        logger.info("Updated customer %s", customer_id)
    else:
        await store.create(customer_id, record)
        logger.info("Created customer %s", customer_id)

    await notifier.send_profile_submitted(body.model_dump())

    return {
        "success": True,
        "data": record,
        "message": "Customer profile updated successfully" if exists else "Customer profile created successfully",
    }


@router.get("/customer/{customer_id}")
async def get_customer(customer_id: str, store: CustomerStore = Depends(get_customer_store)) -> dict:
    data = await store.get(customer_id)
    if data is None:
        raise NotFoundError("Customer not found", f"No customer found with ID: {customer_id}")
    return {"success": True, "data": {"id": customer_id, **data}}


@router.get("/customers")
async def list_customers(
    limit: int = 50,
    startAfter: str | None = None,
    role: str | None = None,
    isVerified: str | None = None,
    country: str | None = None,
    sortBy: str = "createdAt",
    sortOrder: str = "desc",
    store: CustomerStore = Depends(get_customer_store),
) -> dict:
    page_size = max(1, min(limit, MAX_PAGE_SIZE))
    params = CustomerQuery(
        limit=page_size,
        start_after=startAfter,
        role=role,
        is_verified=None if isVerified is None else isVerified == "true",
        country=country,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    rows = await store.list(params)
    customers = [summarize_customer(doc_id, data) for doc_id, data in rows]
    return {
        "success": True,
        "data": {
            "customers": customers,
            "pageInfo": {
                "hasNextPage": len(customers) == page_size,
                "lastDocId": rows[-1][0] if rows else None,
                "totalCount": len(customers),
            },
        },
    }


@router.post("/verify")
async def verify_customer(body: VerifyRequest, store: CustomerStore = Depends(get_customer_store)) -> dict:
    require_fields(body.model_dump(), ["customerId"], error="Missing required field")
    if not isinstance(body.isVerified, bool):
        raise InvalidRequest(
            "invalid_is_verified",
            "Invalid isVerified value",
            "isVerified must be a boolean (true or false)",
        )

    customer_id = str(body.customerId)
    if await store.get(customer_id) is None:
        raise NotFoundError("Customer not found", f"No customer found with ID: {customer_id}")

    now = _now()
    await store.update(
        customer_id,
        {"isVerified": body.isVerified, "updatedAt": now, "verifiedAt": now if body.isVerified else None},
    )
    logger.info("Updated isVerified for customer %s to %s", customer_id, body.isVerified)
    return {
        "success": True,
        "message": f"Customer verification status updated to {str(body.isVerified).lower()}",
        "data": {"customerId": customer_id, "isVerified": body.isVerified, "updatedAt": now},
    }


@router.delete("/customer/{customer_id}")
async def delete_customer(customer_id: str, store: CustomerStore = Depends(get_customer_store)) -> dict:
    if await store.get(customer_id) is None:
        raise NotFoundError("Customer not found", f"No customer found with ID: {customer_id}")
    await store.delete(customer_id)
    logger.info("Deleted customer %s", customer_id)
    return {"success": True, "message": f"Customer {customer_id} deleted successfully"}
