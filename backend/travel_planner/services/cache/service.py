"""Cache service implementation.

This module provides the abstract cache service interface shared by every
cache domain, and a Redis implementation for deployments that run several
workers against one shared cache. The in-process implementation lives in
:mod:`travel_planner.services.cache.memory`.

Contract (all backends):
- A value is readable until its TTL elapses, and never after.
- Reads never evict; expired entries are purged by :meth:`CacheService.sweep`.
- Hit and miss counters are cumulative for the lifetime of the instance.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

import redis.asyncio as redis
from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)

T = TypeVar("T")

ExpiryListener = Callable[[str, Any], None]


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of a cache domain's counters."""
    domain: str
    keys: int
    hits: int
    misses: int


class CacheService(ABC, Generic[T]):
    """Abstract base class for cache services.

    Defines the interface for caching operations including get, set,
    invalidation, sweeping and introspection. Every instance belongs to one
    cache domain with its own default TTL.
    """

    def __init__(self, domain: str, default_ttl: int) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._domain = domain
        self._default_ttl = default_ttl
        self._expiry_listeners: list[ExpiryListener] = []

    @abstractmethod
    async def get(self, key: str) -> tuple[T | None, bool]:
        """Retrieve a live value by key.

        Args:
            key: The cache key to look up.

        Returns:
            ``(value, True)`` if a non-expired entry exists,
            ``(None, False)`` otherwise.
        """

    @abstractmethod
    async def set(self, key: str, value: T, ttl_seconds: int | None = None) -> None:
        """Store value in cache, replacing any previous entry.

        Args:
            key: The cache key to store under.
            value: The value to cache.
            ttl_seconds: Time-to-live in seconds. Uses the domain default if
                not specified.
        """

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Delete a specific key. Returns the number of entries removed."""

    @abstractmethod
    async def delete_matching(self, predicate: Callable[[str], bool]) -> int:
        """Delete every entry whose key satisfies ``predicate``.

        Returns:
            Number of entries removed.
        """

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys. May include expired entries not yet swept."""

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Key count and cumulative hit/miss counters."""

    @abstractmethod
    async def sweep(self) -> int:
        """Purge expired entries. Returns the number of entries removed."""

    async def invalidate(self, pattern: str) -> int:
        """Invalidate every entry whose key contains ``pattern``.

        Args:
            pattern: Substring to match, e.g. ``"paris"`` or ``"flights:"``.

        Returns:
            Number of keys invalidated.
        """
        return await self.delete_matching(lambda key: pattern in key)

    async def clear(self) -> int:
        """Remove every entry in this domain."""
        return await self.delete_matching(lambda key: True)

    def add_expiry_listener(self, listener: ExpiryListener) -> None:
        """Register a callback invoked with ``(key, value)`` for each entry a sweep evicts."""
        self._expiry_listeners.append(listener)

    def _notify_expired(self, key: str, value: Any) -> None:
        for listener in self._expiry_listeners:
            try:
                listener(key, value)
            except Exception:
                logger.exception(f"[CACHE] Expiry listener failed for {key}")

    def _resolve_ttl(self, ttl_seconds: int | None) -> int:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")
        return ttl

    @property
    def domain(self) -> str:
        """Name of the cache domain."""
        return self._domain

    @property
    def default_ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._default_ttl


class RedisCacheService(CacheService[T]):
    """Redis-based implementation of the cache service.

    Values are stored as JSON under ``<prefix><domain>:<key>`` with a native
    Redis expiry, so Redis evicts them on its own and :meth:`sweep` has
    nothing to do. Pydantic models come back as plain dicts and lists;
    callers re-validate them into their result types.

    Attributes:
        _client: The Redis async client instance.
        _default_ttl: Default TTL in seconds for cached values.
    """

    def __init__(
        self,
        domain: str,
        default_ttl: int = 900,
        redis_url: str = "redis://localhost:6379",
        prefix: str = "travel_planner:",
        client: redis.Redis | None = None,
    ) -> None:
        """Initialize the Redis cache service.

        Args:
            domain: Cache domain name, used in the key namespace.
            default_ttl: Default TTL in seconds.
            redis_url: Redis connection URL. Defaults to localhost:6379.
            prefix: Namespace prefix shared by every domain of this app.
            client: Pre-built client (tests, shared pools).
        """
        super().__init__(domain, default_ttl)
        self._redis_url = redis_url
        self._namespace = f"{prefix}{domain}:"
        self._client: redis.Redis | None = client
        self._hits = 0
        self._misses = 0

    async def connect(self) -> None:
        """Establish connection to Redis.

        Should be called before using the cache service.
        """
        if self._client is None:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def disconnect(self) -> None:
        """Close the Redis connection.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_connected(self) -> redis.Redis:
        if self._client is None:
            await self.connect()
        return self._client  # type: ignore

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def _scan_keys(self) -> list[str]:
        """Return every stored key of this domain, without the namespace.

        Uses SCAN rather than KEYS so large keyspaces don't block Redis.
        """
        client = await self._ensure_connected()
        found: list[str] = []
        cursor = 0
        while True:
            cursor, keys = await client.scan(
                cursor=cursor, match=f"{self._namespace}*", count=100
            )
            found.extend(k[len(self._namespace):] for k in keys)
            if cursor == 0:
                break
        return found

    async def get(self, key: str) -> tuple[T | None, bool]:
        client = await self._ensure_connected()
        raw = await client.get(self._full_key(key))
        if raw is None:
            self._misses += 1
            return None, False
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[CACHE] Dropping undecodable entry {key}")
            await client.delete(self._full_key(key))
            self._misses += 1
            return None, False
        self._hits += 1
        return value, True

    async def set(self, key: str, value: T, ttl_seconds: int | None = None) -> None:
        client = await self._ensure_connected()
        ttl = self._resolve_ttl(ttl_seconds)
        serialized = json.dumps(to_jsonable_python(value))
        await client.set(self._full_key(key), serialized, ex=ttl)

    async def delete(self, key: str) -> int:
        client = await self._ensure_connected()
        return int(await client.delete(self._full_key(key)))

    async def delete_matching(self, predicate: Callable[[str], bool]) -> int:
        client = await self._ensure_connected()
        matching = [self._full_key(k) for k in await self._scan_keys() if predicate(k)]
        if not matching:
            return 0
        return int(await client.delete(*matching))

    async def keys(self) -> list[str]:
        return await self._scan_keys()

    async def stats(self) -> CacheStats:
        keys = await self._scan_keys()
        return CacheStats(
            domain=self._domain, keys=len(keys), hits=self._hits, misses=self._misses
        )

    async def sweep(self) -> int:
        # Redis expires keys itself.
        return 0
