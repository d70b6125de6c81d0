"""Customer profile records stored in Firestore.

The official synchronous client is used; blocking calls are wrapped via
``asyncio.to_thread``.
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from .config import settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@lru_cache(maxsize=1)
def get_firestore_client() -> firestore.Client:
    info = json.loads(base64.b64decode(settings.service_account_base64).decode("utf-8"))
    credentials = service_account.Credentials.from_service_account_info(info)
    logger.info("Connecting to Firestore project %s", info.get("project_id"))
    return firestore.Client(project=info.get("project_id"), credentials=credentials)


@dataclass
class CustomerQuery:
    limit: int = 50
    start_after: Optional[str] = None
    role: Optional[str] = None
    is_verified: Optional[bool] = None
    country: Optional[str] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"


class CustomerStore:
    def __init__(self, client: firestore.Client, collection: str = settings.firestore_collection) -> None:
        self._collection = client.collection(collection)

    async def _call(self, action: str, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except GoogleAPIError as exc:
            logger.error("Firestore %s failed: %s", action, exc)
            raise UpstreamError(f"Failed to {action}", str(exc)) from exc

    async def get(self, customer_id: str) -> Optional[Dict[str, Any]]:
        snapshot = await self._call("retrieve customer data", self._collection.document(customer_id).get)
        return snapshot.to_dict() if snapshot.exists else None

    async def create(self, customer_id: str, data: Dict[str, Any]) -> None:
        await self._call("update customer data", self._collection.document(customer_id).set, data)

    async def update(self, customer_id: str, data: Dict[str, Any]) -> None:
        await self._call("update customer data", self._collection.document(customer_id).update, data)

    async def delete(self, customer_id: str) -> None:
        await self._call("delete customer", self._collection.document(customer_id).delete)

    def _stream(self, params: CustomerQuery) -> List[tuple[str, Dict[str, Any]]]:
        query = self._collection
        if params.role:
            query = query.where(filter=FieldFilter("role", "==", params.role))
        if params.is_verified is not None:
            query = query.where(filter=FieldFilter("isVerified", "==", params.is_verified))
        if params.country:
            query = query.where(filter=FieldFilter("country", "==", params.country))
        direction = firestore.Query.ASCENDING if params.sort_order == "asc" else firestore.Query.DESCENDING
        query = query.order_by(params.sort_by, direction=direction).limit(params.limit)
        if params.start_after:
            cursor = self._collection.document(params.start_after).get()
            if cursor.exists:
                query = query.start_after(cursor)
        return [(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    async def list(self, params: CustomerQuery) -> List[tuple[str, Dict[str, Any]]]:
        """Return ``(document id, record)`` pairs for one page of customers."""
        return await self._call("retrieve customers", self._stream, params)
