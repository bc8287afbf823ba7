"""Travel Planner Services.

Service layer components:
- Cache: expiring in-memory or Redis stores, key builders, cache-or-fetch
- Search: SerpApi restaurant, attraction, hotel and flight searches
- Locations: place name to airport code / Freebase ID, with Wikidata fallback
"""

from .cache import (
    CacheService,
    CacheStats,
    CacheSweeper,
    InflightRequests,
    MemoryCacheService,
    RedisCacheService,
    get_or_set,
)
from .locations import LocationCodeNormalizer, WikidataService
from .search import (
    SearchService,
    SerpApiClient,
    TripSearchRequest,
    TripSearchResults,
    TripSearchService,
)

__all__ = [
    # Cache
    "CacheService",
    "CacheStats",
    "CacheSweeper",
    "InflightRequests",
    "MemoryCacheService",
    "RedisCacheService",
    "get_or_set",
    # Locations
    "LocationCodeNormalizer",
    "WikidataService",
    # Search
    "SearchService",
    "SerpApiClient",
    "TripSearchRequest",
    "TripSearchResults",
    "TripSearchService",
]
