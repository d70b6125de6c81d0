"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    shopify_store: str = _get_env("SHOPIFY_STORE", "")
    shopify_admin_token: str = _get_env("SHOPIFY_ADMIN_TOKEN", "")
    shopify_graphql_version: str = _get_env("SHOPIFY_GRAPHQL_VERSION", "2025-01")
    shopify_rest_version: str = _get_env("SHOPIFY_REST_VERSION", "2025-07")
    gemini_api_key: str = _get_env("GEMINI_API_KEY", "")
    gemini_model: str = _get_env("GEMINI_MODEL", "gemini-2.0-flash")
    ai_timeout_seconds: float = float(_get_env("AI_TIMEOUT_SECONDS", "30"))
    ai_max_attempts: int = int(_get_env("AI_MAX_ATTEMPTS", "3"))
    ai_backoff_seconds: float = float(_get_env("AI_BACKOFF_SECONDS", "1"))
    catalog_page_size: int = int(_get_env("CATALOG_PAGE_SIZE", "250"))
    catalog_cache_ttl_seconds: int = int(_get_env("CATALOG_CACHE_TTL_SECONDS", "600"))
    search_cache_ttl_seconds: int = int(_get_env("SEARCH_CACHE_TTL_SECONDS", "300"))
    search_cache_max_entries: int = int(_get_env("SEARCH_CACHE_MAX_ENTRIES", "100"))
    search_cache_evict_batch: int = int(_get_env("SEARCH_CACHE_EVICT_BATCH", "20"))
    ai_search_rate_limit: int = int(_get_env("AI_SEARCH_RATE_LIMIT", "5"))
    ai_search_rate_window_seconds: int = int(_get_env("AI_SEARCH_RATE_WINDOW_SECONDS", "60"))
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    service_account_base64: str = _get_env("SERVICE_BASE64", "")
    firestore_collection: str = _get_env("FIRESTORE_COLLECTION", "customers")
    email_smtp_host: str = _get_env("EMAIL_SMTP_HOST", "smtp.gmail.com")
    email_smtp_port: int = int(_get_env("EMAIL_SMTP_PORT", "465"))
    email_user: str = _get_env("EMAIL_USER", "")
    email_pass: str = _get_env("EMAIL_PASS", "")
    admin_email: str = _get_env("ADMIN_EMAIL", "")
    log_level: str = _get_env("LOG_LEVEL", "INFO")

    def missing_required(self) -> list[str]:
        """Names of required environment variables that are not set."""
        missing = []
        if not self.shopify_store:
            missing.append("SHOPIFY_STORE")
        if not self.shopify_admin_token:
            missing.append("SHOPIFY_ADMIN_TOKEN")
        return missing


settings = Settings()
