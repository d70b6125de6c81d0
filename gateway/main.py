"""FastAPI application wiring the storefront gateway."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import SearchCache
from .catalog import CatalogFetcher
from .config import settings
from .errors import GatewayError
from .gemini import GeminiClient
from .matcher import AIMatchResolver
from .notifier import BestEffortNotifier, SmtpNotifier
from .routes import ai_search, customer_lists, customers, metafields
from .search_service import SearchOrchestrator
from .shopify import ShopifyClient

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# ``force=True`` replaces uvicorn's default handlers so every module logger
# shares one format and level.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Storefront Gateway")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(metafields.router)
app.include_router(customers.router)
app.include_router(customer_lists.router)
app.include_router(ai_search.router)


@app.on_event("startup")
async def startup_event() -> None:
    missing = settings.missing_required()
    if missing:
        logger.error("Missing required environment variables: %s", ", ".join(missing))
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    shopify = ShopifyClient()
    gemini = GeminiClient()
    search_cache = SearchCache()
    app.state.shopify = shopify
    app.state.gemini = gemini
    app.state.search_cache = search_cache
    app.state.orchestrator = SearchOrchestrator(
        search_cache,
        CatalogFetcher(shopify, search_cache),
        AIMatchResolver(gemini),
    )
    app.state.notifier = BestEffortNotifier(SmtpNotifier())
    logger.info("Shopify store: %s", settings.shopify_store)
    logger.info("Admin API token: %s", "configured" if settings.shopify_admin_token else "not configured")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    for name in ("shopify", "gemini"):
        client = getattr(app.state, name, None)
        if client is not None:
            await client.aclose()


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Something went wrong!", "details": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request",
            "code": "invalid_body",
            "details": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()
            ],
        },
    )


@app.get("/health")
async def health() -> dict:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "shopify_store": "configured" if settings.shopify_store else "not configured",
    }
