"""Unit tests for settings and service wiring."""

import pytest

from travel_planner.config import GENERAL_DOMAIN, SEARCH_DOMAIN, Settings
from travel_planner.dependencies import ServiceContainer
from travel_planner.services.cache import MemoryCacheService, RedisCacheService


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, monkeypatch) -> None:
        for name in ("SERPAPI_API_KEY", "CACHE_BACKEND", "SEARCH_CACHE_TTL", "CACHE_COALESCE_MISSES"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.serpapi_api_key is None
        assert not settings.serpapi_configured
        assert settings.cache_backend == "memory"
        assert settings.coalesce_misses is True
        assert [(d.name, d.default_ttl, d.check_period) for d in settings.cache_domains()] == [
            (SEARCH_DOMAIN, 900, 120),
            (GENERAL_DOMAIN, 300, 60),
        ]

    def test_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("SERPAPI_API_KEY", "abc")
        monkeypatch.setenv("SEARCH_CACHE_TTL", "60")
        monkeypatch.setenv("CACHE_BACKEND", "Redis")
        monkeypatch.setenv("CACHE_COALESCE_MISSES", "false")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")

        settings = Settings.from_env()

        assert settings.serpapi_configured
        assert settings.search_cache_ttl == 60
        assert settings.cache_backend == "redis"
        assert settings.coalesce_misses is False
        assert settings.cors_origins == ["https://a.test", "https://b.test"]

    def test_unknown_backend_falls_back_to_memory(self, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "memcached")
        assert Settings.from_env().cache_backend == "memory"


class TestServiceContainer:
    """Tests for ServiceContainer.build."""

    def test_memory_backend_gets_sweepers(self) -> None:
        services = ServiceContainer.build(Settings(serpapi_api_key="k"))

        assert set(services.caches) == {SEARCH_DOMAIN, GENERAL_DOMAIN}
        assert all(isinstance(c, MemoryCacheService) for c in services.caches.values())
        assert len(services.sweepers) == 2
        assert services.caches[SEARCH_DOMAIN].default_ttl == 900
        assert services.caches[GENERAL_DOMAIN].default_ttl == 300

    def test_redis_backend_has_no_sweepers(self) -> None:
        services = ServiceContainer.build(Settings(cache_backend="redis"))

        assert all(isinstance(c, RedisCacheService) for c in services.caches.values())
        assert services.sweepers == []

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self) -> None:
        services = ServiceContainer.build(Settings(serpapi_api_key="k"))

        await services.startup()
        assert all(s.running for s in services.sweepers)

        await services.shutdown()
        assert not any(s.running for s in services.sweepers)
