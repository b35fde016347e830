import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Look for .env in project root (parent of server/)
_env_file = Path(__file__).resolve().parent.parent.parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_env_file, extra="ignore")

    # Environment
    env: Literal["development", "production"] = "development"

    # Server
    port: int = 8000

    # Upstream news API
    news_api_base_url: str = "http://localhost:3000/api/v1"
    news_api_key: str = ""
    news_api_timeout_seconds: float = 10.0

    # Search result cache (in-memory, per process)
    search_cache_max_entries: int = 100
    search_cache_ttl_seconds: int = 300  # 5 minutes
    # Rough per-item sizes for the memory estimate shown in cache stats
    search_cache_bytes_per_result: int = 1024
    search_cache_bytes_per_suggestion: int = 50

    # Admin key for cache maintenance endpoints (X-Admin-Api-Key header)
    admin_api_key: str = ""

    # Trusted proxy IPs for X-Forwarded-For (comma-separated)
    trusted_proxies: str = "127.0.0.1,::1"

    # CORS - comma-separated origins or "*" for all (dev only)
    cors_origins: str = "*"

    # Rate limiting (disabled by default in dev, enable in prod)
    rate_limit_enabled: bool | None = None  # None = auto (disabled in dev, enabled in prod)
    search_rate_limit_per_minute: int = 30

    @property
    def is_rate_limit_enabled(self) -> bool:
        """Check if rate limiting is enabled (auto-detect based on env if not set)."""
        if self.rate_limit_enabled is not None:
            return self.rate_limit_enabled
        return self.is_production

    @property
    def news_api_url(self) -> str:
        """Return the upstream base URL without a trailing slash."""
        return self.news_api_base_url.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def validate_settings(settings: Settings) -> None:
    """Validate required settings and print helpful error messages."""
    errors = []

    if settings.search_cache_max_entries < 1:
        errors.append("SEARCH_CACHE_MAX_ENTRIES must be at least 1")
    if settings.search_cache_ttl_seconds < 1:
        errors.append("SEARCH_CACHE_TTL_SECONDS must be at least 1")

    if settings.is_production:
        if settings.cors_origins == "*":
            errors.append(
                "CORS_ORIGINS should not be '*' in production - "
                "set to your frontend domain (e.g., https://news.example.com)"
            )
        if not settings.admin_api_key:
            errors.append("ADMIN_API_KEY must be set in production")

    if not settings.is_production and not settings.admin_api_key:
        logging.warning("ADMIN_API_KEY not set - cache maintenance endpoints are disabled")

    if not settings.news_api_key:
        logging.warning("NEWS_API_KEY not set - upstream requests are sent unauthenticated")

    if errors:
        for error in errors:
            logging.error("Configuration error: %s", error)
        sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    validate_settings(settings)
    return settings
