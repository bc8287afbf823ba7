"""In-memory cache with per-entry TTL expiration.

Process-level store for search results. Survives across requests in the same
uvicorn worker, lost on restart. Expired entries are treated as absent on
read and purged by a periodic sweep, which bounds memory for keys that are
never read again.
"""

import asyncio
import logging
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .service import CacheService, CacheStats

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with its absolute expiry deadline."""
    value: T
    created_at: float
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class MemoryCacheService(CacheService[T]):
    """TTL-aware in-process cache.

    Safe to share between request handlers: the entry map is guarded by a
    lock, and no operation performs I/O while holding it.
    """

    def __init__(
        self,
        domain: str = "default",
        default_ttl: int = 300,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__(domain, default_ttl)
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> tuple[T | None, bool]:
        return self.get_nowait(key)

    def get_nowait(self, key: str) -> tuple[T | None, bool]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_live(now):
                self._misses += 1
                return None, False
            self._hits += 1
            return entry.value, True

    async def set(self, key: str, value: T, ttl_seconds: int | None = None) -> None:
        self.set_nowait(key, value, ttl_seconds)

    def set_nowait(self, key: str, value: T, ttl_seconds: int | None = None) -> None:
        ttl = self._resolve_ttl(ttl_seconds)
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl)

    async def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._entries.pop(key, None) is not None else 0

    async def delete_matching(self, predicate: Callable[[str], bool]) -> int:
        with self._lock:
            matching = [key for key in self._entries if predicate(key)]
            for key in matching:
                del self._entries[key]
        return len(matching)

    async def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    async def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                domain=self._domain,
                keys=len(self._entries),
                hits=self._hits,
                misses=self._misses,
            )

    async def sweep(self) -> int:
        return self.sweep_nowait()

    def sweep_nowait(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                (key, entry) for key, entry in self._entries.items() if not entry.is_live(now)
            ]
            for key, _ in expired:
                del self._entries[key]
        # Listeners run outside the lock so they may touch the cache.
        for key, entry in expired:
            self._notify_expired(key, entry.value)
        return len(expired)


class CacheSweeper:
    """Runs a cache's sweep on a fixed interval in a background task."""

    def __init__(self, cache: CacheService, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(
            self._run(), name=f"cache-sweeper-{self._cache.domain}"
        )
        logger.info(f"[CACHE] Sweeper started for '{self._cache.domain}' every {self._interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                removed = await self._cache.sweep()
                if removed:
                    logger.debug(f"[CACHE] Swept {removed} expired entries from '{self._cache.domain}'")
            except Exception:
                logger.exception(f"[CACHE] Sweep failed for '{self._cache.domain}'")
