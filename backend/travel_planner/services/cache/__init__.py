"""Cache service module.

Expiring key-value stores (in-memory or Redis), cache key builders, and the
cache-or-fetch coordinator used by every search adapter.
"""

from .coordinator import InflightRequests, get_or_set
from .keys import (
    build_attraction_key,
    build_booking_options_key,
    build_flight_key,
    build_hotel_key,
    build_restaurant_key,
)
from .memory import CacheEntry, CacheSweeper, MemoryCacheService
from .service import CacheService, CacheStats, RedisCacheService

__all__ = [
    "CacheService",
    "CacheStats",
    "CacheEntry",
    "MemoryCacheService",
    "RedisCacheService",
    "CacheSweeper",
    "InflightRequests",
    "get_or_set",
    "build_restaurant_key",
    "build_attraction_key",
    "build_hotel_key",
    "build_flight_key",
    "build_booking_options_key",
]
