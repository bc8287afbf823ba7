"""Cache-or-fetch coordination.

Every search adapter reads and writes the cache through :func:`get_or_set`:
return the cached value when there is one, otherwise run the fetch, store
what it returns, and return it. A failed fetch is never stored, so the next
call retries upstream.

Concurrent misses on the same key can optionally share one fetch through an
:class:`InflightRequests` registry instead of each calling upstream.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .service import CacheService

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetch = Callable[[], Awaitable[T]]


class InflightRequests:
    """Tracks fetches currently running, by cache key.

    The first miss for a key starts the fetch as its own task; later misses
    for the same key await that task. A finished task is never joined, so
    failures are shared only by callers that were already waiting.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    async def run(self, key: str, fetch: Fetch[T]) -> T:
        task = self._pending.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(fetch())
            self._pending[key] = task
            task.add_done_callback(lambda done: self._discard(key, done))
        else:
            logger.debug(f"[CACHE] JOIN {key}")
        # A cancelled waiter must not cancel the fetch other waiters share.
        return await asyncio.shield(task)

    def _discard(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled():
            # Retrieve it so a failure nobody awaited isn't logged as unhandled.
            task.exception()


async def get_or_set(
    cache: CacheService[T],
    key: str,
    fetch: Fetch[T],
    ttl_seconds: Optional[int] = None,
    inflight: Optional[InflightRequests] = None,
) -> T:
    """Get data from cache, or run ``fetch`` and cache its result.

    Args:
        cache: Cache domain to read and write.
        key: Cache key for the request.
        fetch: Deferred upstream call, run only on a miss.
        ttl_seconds: TTL override. Uses the domain default if not given.
        inflight: Registry used to coalesce concurrent misses on ``key``.

    Returns:
        The cached or freshly fetched value.

    Raises:
        Whatever ``fetch`` raises. Nothing is cached in that case.
    """
    cached, found = await cache.get(key)
    if found:
        logger.debug(f"[CACHE] HIT {key}")
        return cached  # type: ignore[return-value]

    logger.debug(f"[CACHE] MISS {key}")

    async def fetch_and_store() -> T:
        data = await fetch()
        await cache.set(key, data, ttl_seconds)
        return data

    if inflight is None:
        return await fetch_and_store()
    return await inflight.run(key, fetch_and_store)
