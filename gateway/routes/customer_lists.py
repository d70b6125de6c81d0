"""Favorite list endpoints backed by Shopify customer metafields."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_shopify
from ..favorites import FavoriteLists
from ..models import ListProductRequest, ListRequest
from ..shopify import ShopifyClient
from ..validation import require_fields

router = APIRouter(prefix="/customer-lists", tags=["customer-lists"])


def get_favorites(shopify: ShopifyClient = Depends(get_shopify)) -> FavoriteLists:
    return FavoriteLists(shopify)


@router.get("/get")
async def get_lists(customerId: str | None = None, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields({"customerId": customerId}, ["customerId"], error="Missing customerId")
    return {"success": True, "lists": await favorites.list_names(customerId)}


@router.post("/add")
async def add_list(body: ListRequest, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields(body.model_dump(), ["customerId", "listName"], error="Missing customerId or listName")
    return await favorites.add_list(str(body.customerId), body.listName)


@router.post("/products")
async def list_products(body: ListRequest, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields(body.model_dump(), ["customerId", "listName"], error="Missing customerId or listName")
    products = await favorites.list_products(str(body.customerId), body.listName)
    return {"success": True, "products": products}


@router.post("/add-product")
async def add_product(body: ListProductRequest, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields(
        body.model_dump(),
        ["customerId", "listName", "productId"],
        error="Missing customerId, listName, or productId",
    )
    return await favorites.add_product(str(body.customerId), body.listName, str(body.productId))


@router.post("/remove-product")
async def remove_product(body: ListProductRequest, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields(
        body.model_dump(),
        ["customerId", "listName", "productId"],
        error="Missing customerId, listName, or productId",
    )
    return await favorites.remove_product(str(body.customerId), body.listName, str(body.productId))


@router.post("/delete")
async def delete_list(body: ListRequest, favorites: FavoriteLists = Depends(get_favorites)) -> dict:
    require_fields(body.model_dump(), ["customerId", "listName"], error="Missing customerId or listName")
    return await favorites.delete_list(str(body.customerId), body.listName)
