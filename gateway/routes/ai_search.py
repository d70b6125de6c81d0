"""Natural-language product search endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_orchestrator
from ..models import SearchRequest
from ..rate_limit import ai_search_rate_limit
from ..search_service import SearchOrchestrator

router = APIRouter(prefix="/ai-search", tags=["ai-search"])


@router.post("", dependencies=[Depends(ai_search_rate_limit)])
async def ai_search(
    body: SearchRequest | None = None,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.search(body.query if body else None)
    return {"success": True, "data": result}
