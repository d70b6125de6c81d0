"""FastAPI dependencies resolving the per-application service objects."""
from __future__ import annotations

import logging

from fastapi import Request

from .customer_store import CustomerStore, get_firestore_client
from .errors import GatewayError
from .notifier import Notifier
from .search_service import SearchOrchestrator
from .shopify import ShopifyClient

logger = logging.getLogger(__name__)


def get_shopify(request: Request) -> ShopifyClient:
    return request.app.state.shopify


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_customer_store(request: Request) -> CustomerStore:
    store = getattr(request.app.state, "customer_store", None)
    if store is None:
        try:
            store = CustomerStore(get_firestore_client())
        except ValueError as exc:
            logger.error("Firestore is not configured: %s", exc)
            raise GatewayError("Document store not configured", "SERVICE_BASE64 is missing or invalid") from exc
        request.app.state.customer_store = store
    return store
