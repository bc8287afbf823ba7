"""Service wiring.

One :class:`ServiceContainer` is built at startup and stored on
``app.state``. Route handlers receive its services through FastAPI
dependencies, so tests can build a container with fake caches or HTTP
transports and hand it to the app.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Request

from travel_planner.config import GENERAL_DOMAIN, SEARCH_DOMAIN, CacheDomain, Settings
from travel_planner.services.cache import (
    CacheService,
    CacheSweeper,
    InflightRequests,
    MemoryCacheService,
    RedisCacheService,
)
from travel_planner.services.locations import LocationCodeNormalizer, WikidataService
from travel_planner.services.search import SearchService, SerpApiClient, TripSearchService

logger = logging.getLogger(__name__)


def create_cache(domain: CacheDomain, settings: Settings) -> CacheService:
    """Create the cache store for a domain using the configured backend."""
    if settings.cache_backend == "redis":
        logger.info(f"[CACHE] '{domain.name}' backed by Redis ({settings.redis_url})")
        return RedisCacheService(
            domain=domain.name,
            default_ttl=domain.default_ttl,
            redis_url=settings.redis_url,
        )
    return MemoryCacheService(domain=domain.name, default_ttl=domain.default_ttl)


def _log_expired(key: str, value: Any) -> None:
    logger.info(f"[CACHE] Search cache entry expired: {key}")


@dataclass
class ServiceContainer:
    settings: Settings
    caches: dict[str, CacheService]
    serp_client: SerpApiClient
    wikidata: WikidataService
    search: SearchService
    trips: TripSearchService
    sweepers: list[CacheSweeper] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        settings: Settings,
        caches: Optional[dict[str, CacheService]] = None,
        serp_client: Optional[SerpApiClient] = None,
        wikidata: Optional[WikidataService] = None,
    ) -> "ServiceContainer":
        domains = settings.cache_domains()
        if caches is None:
            caches = {domain.name: create_cache(domain, settings) for domain in domains}
        caches[SEARCH_DOMAIN].add_expiry_listener(_log_expired)

        serp_client = serp_client or SerpApiClient(
            api_key=settings.serpapi_api_key,
            base_url=settings.serpapi_base_url,
            timeout=settings.request_timeout,
        )
        wikidata = wikidata or WikidataService(
            api_url=settings.wikidata_api_url,
            timeout=settings.wikidata_timeout,
        )
        search = SearchService(
            client=serp_client,
            search_cache=caches[SEARCH_DOMAIN],
            general_cache=caches[GENERAL_DOMAIN],
            normalizer=LocationCodeNormalizer(wikidata),
            default_limit=settings.default_limit,
            flight_ttl=settings.flight_cache_ttl,
            inflight=InflightRequests() if settings.coalesce_misses else None,
            request_timeout=settings.request_timeout,
            resolve_timeout=settings.wikidata_timeout,
        )
        sweepers = [
            CacheSweeper(caches[domain.name], domain.check_period)
            for domain in domains
            if isinstance(caches[domain.name], MemoryCacheService)
        ]
        return cls(
            settings=settings,
            caches=caches,
            serp_client=serp_client,
            wikidata=wikidata,
            search=search,
            trips=TripSearchService(search),
            sweepers=sweepers,
        )

    async def startup(self) -> None:
        for sweeper in self.sweepers:
            sweeper.start()
        if not self.serp_client.is_configured:
            logger.warning("[SERP] SERPAPI_API_KEY is not set; searches will be unavailable")

    async def shutdown(self) -> None:
        for sweeper in self.sweepers:
            await sweeper.stop()
        for stats in await self.search.cache_stats():
            logger.info(
                f"[CACHE] {stats.domain}: {stats.keys} keys, {stats.hits} hits, {stats.misses} misses"
            )
        await self.serp_client.close()
        await self.wikidata.close()
        for cache in self.caches.values():
            if isinstance(cache, RedisCacheService):
                await cache.disconnect()


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_search_service(request: Request) -> SearchService:
    return get_container(request).search


def get_trip_service(request: Request) -> TripSearchService:
    return get_container(request).trips
