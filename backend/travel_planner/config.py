"""Application settings.

All values come from environment variables (a local ``.env`` file is loaded
first). Settings are read once per process through :func:`get_settings`.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SERPAPI_BASE_URL = "https://serpapi.com/search"
WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"

SEARCH_DOMAIN = "search"
GENERAL_DOMAIN = "general"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class CacheDomain:
    """A group of cache entries sharing a default TTL and sweep interval."""
    name: str
    default_ttl: int
    check_period: int


@dataclass(frozen=True)
class Settings:
    serpapi_api_key: str | None = None
    serpapi_base_url: str = SERPAPI_BASE_URL
    request_timeout: float = 10.0
    default_limit: int = 10

    # Search results: 15 minutes, swept every 2 minutes.
    search_cache_ttl: int = 900
    search_cache_check_period: int = 120
    # Flight prices move faster than places.
    flight_cache_ttl: int = 300
    # General API responses: 5 minutes, swept every minute.
    general_cache_ttl: int = 300
    general_cache_check_period: int = 60

    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379"
    coalesce_misses: bool = True

    wikidata_api_url: str = WIKIDATA_API_URL
    wikidata_timeout: float = 5.0

    log_level: str = "INFO"
    cors_origins: list[str] = field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ]
    )

    @property
    def serpapi_configured(self) -> bool:
        return bool(self.serpapi_api_key and self.serpapi_api_key.strip())

    def cache_domains(self) -> list[CacheDomain]:
        return [
            CacheDomain(SEARCH_DOMAIN, self.search_cache_ttl, self.search_cache_check_period),
            CacheDomain(GENERAL_DOMAIN, self.general_cache_ttl, self.general_cache_check_period),
        ]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        try:
            load_dotenv()
        except Exception:
            logger.warning("[CONFIG] Could not load .env file", exc_info=True)

        backend = os.getenv("CACHE_BACKEND", "memory").strip().lower()
        if backend not in ("memory", "redis"):
            logger.warning(f"[CONFIG] Unknown CACHE_BACKEND '{backend}', using memory")
            backend = "memory"

        return cls(
            serpapi_api_key=os.getenv("SERPAPI_API_KEY") or None,
            serpapi_base_url=os.getenv("SERPAPI_BASE_URL", SERPAPI_BASE_URL),
            request_timeout=float(os.getenv("SEARCH_REQUEST_TIMEOUT", "10")),
            default_limit=int(os.getenv("SEARCH_DEFAULT_LIMIT", "10")),
            search_cache_ttl=int(os.getenv("SEARCH_CACHE_TTL", "900")),
            search_cache_check_period=int(os.getenv("SEARCH_CACHE_CHECK_PERIOD", "120")),
            flight_cache_ttl=int(os.getenv("FLIGHT_CACHE_TTL", "300")),
            general_cache_ttl=int(os.getenv("GENERAL_CACHE_TTL", "300")),
            general_cache_check_period=int(os.getenv("GENERAL_CACHE_CHECK_PERIOD", "60")),
            cache_backend=backend,
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            coalesce_misses=_env_bool("CACHE_COALESCE_MISSES", True),
            wikidata_api_url=os.getenv("WIKIDATA_API_URL", WIKIDATA_API_URL),
            wikidata_timeout=float(os.getenv("WIKIDATA_TIMEOUT", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_env_list(
                "CORS_ORIGINS", ["http://localhost:3000", "http://localhost:5173"]
            ),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
