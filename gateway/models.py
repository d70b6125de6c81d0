"""Pydantic models for request/response payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductCapsule(BaseModel):
    """Search-ready projection of a product or one of its variants."""

    model_config = ConfigDict(frozen=True)

    id: str
    productId: str
    handle: str | None = None
    title: str
    vendor: str | None = None
    tags: tuple[str, ...] = ()
    productType: str | None = None
    summary: str = ""
    imageUrl: str | None = None
    price: str | None = None
    currency: str | None = None
    sku: str = ""
    inventory: int | None = None
    available: bool = False
    status: str | None = None


class SearchRequest(BaseModel):
    query: str | None = Field(None, description="Free-text search query")


class CustomerMetafieldsRequest(BaseModel):
    customerId: str | int | None = None
    customer_name: str | None = None
    business_name: str | None = None
    customer_role: str | None = None
    customer_phone: str | int | None = None


class CustomerProfileRequest(BaseModel):
    customerId: str | int | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    business_name: str | None = None
    customer_role: str | None = None
    customer_phone: str | int | None = None
    country: str | None = None
    domain_name: str | None = None
    number_of_employees: str | None = None
    retailer_type: str | None = None
    supplier_type: str | None = None
    business_registration: str | None = None


class VerifyRequest(BaseModel):
    customerId: str | int | None = None
    # Kept loose so that non-boolean values can be rejected explicitly.
    isVerified: Any = None


class ListRequest(BaseModel):
    customerId: str | int | None = None
    listName: str | None = None


class ListProductRequest(ListRequest):
    productId: str | int | None = None
