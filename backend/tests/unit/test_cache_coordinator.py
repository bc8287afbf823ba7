"""Unit tests for get_or_set and in-flight request coalescing."""

import asyncio

import pytest

from travel_planner.errors import UpstreamError, UpstreamFailure
from travel_planner.services.cache import (
    InflightRequests,
    MemoryCacheService,
    build_flight_key,
    get_or_set,
)


class CountingFetch:
    """Fetch that returns queued results (or raises queued errors) and counts calls."""

    def __init__(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestGetOrSet:
    """Tests for the cache-or-fetch coordinator."""

    def setup_method(self) -> None:
        self.cache: MemoryCacheService = MemoryCacheService(domain="search", default_ttl=900)

    @pytest.mark.asyncio
    async def test_miss_fetches_and_stores(self) -> None:
        fetch = CountingFetch(["a"])

        result = await get_or_set(self.cache, "k", fetch)

        assert result == ["a"]
        assert fetch.calls == 1
        assert await self.cache.get("k") == (["a"], True)

    @pytest.mark.asyncio
    async def test_hit_suppresses_fetch(self) -> None:
        fetch = CountingFetch(["a"])

        await get_or_set(self.cache, "k", fetch)
        await get_or_set(self.cache, "k", fetch)

        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_cached_empty_list_is_a_hit(self) -> None:
        fetch = CountingFetch([])

        await get_or_set(self.cache, "k", fetch)
        await get_or_set(self.cache, "k", fetch)

        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self) -> None:
        error = UpstreamError("down", UpstreamFailure.UNREACHABLE)
        fetch = CountingFetch(error, ["recovered"])

        with pytest.raises(UpstreamError):
            await get_or_set(self.cache, "k", fetch)
        assert await self.cache.get("k") == (None, False)

        result = await get_or_set(self.cache, "k", fetch)

        assert result == ["recovered"]
        assert fetch.calls == 2
        assert await self.cache.get("k") == (["recovered"], True)

    @pytest.mark.asyncio
    async def test_ttl_override(self) -> None:
        await get_or_set(self.cache, "k", CountingFetch(["a"]), ttl_seconds=300)
        keys = await self.cache.keys()
        assert keys == ["k"]
        entry = self.cache._entries["k"]
        assert entry.expires_at - entry.created_at == 300

    @pytest.mark.asyncio
    async def test_flight_round_trip(self) -> None:
        key = build_flight_key("JFK", "CDG", "2025-12-01", "2025-12-07", adults=2)
        assert key == "flights:jfk:cdg:2025-12-01:2025-12-07:adults:2"
        fetch = CountingFetch(["f1", "f2", "f3"], ["other"])

        first = await get_or_set(self.cache, key, fetch)
        second = await get_or_set(self.cache, key, fetch)

        assert first == second == ["f1", "f2", "f3"]
        assert fetch.calls == 1


class TestInflightRequests:
    """Tests for coalescing concurrent misses."""

    def setup_method(self) -> None:
        self.cache: MemoryCacheService = MemoryCacheService(domain="search", default_ttl=900)
        self.inflight = InflightRequests()

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self) -> None:
        gate = asyncio.Event()
        calls = 0

        async def fetch() -> list[str]:
            nonlocal calls
            calls += 1
            await gate.wait()
            return ["shared"]

        waiters = [
            asyncio.create_task(get_or_set(self.cache, "k", fetch, inflight=self.inflight))
            for _ in range(5)
        ]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*waiters)

        assert calls == 1
        assert results == [["shared"]] * 5
        assert len(self.inflight) == 0

    @pytest.mark.asyncio
    async def test_different_keys_do_not_coalesce(self) -> None:
        fetch = CountingFetch(["v"])

        await asyncio.gather(
            get_or_set(self.cache, "a", fetch, inflight=self.inflight),
            get_or_set(self.cache, "b", fetch, inflight=self.inflight),
        )

        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter_and_is_not_reused(self) -> None:
        gate = asyncio.Event()
        calls = 0

        async def failing() -> list[str]:
            nonlocal calls
            calls += 1
            await gate.wait()
            raise UpstreamError("timeout", UpstreamFailure.TIMEOUT)

        waiters = [
            asyncio.create_task(get_or_set(self.cache, "k", failing, inflight=self.inflight))
            for _ in range(3)
        ]
        await asyncio.sleep(0)
        gate.set()
        outcomes = await asyncio.gather(*waiters, return_exceptions=True)

        assert calls == 1
        assert all(isinstance(o, UpstreamError) for o in outcomes)
        assert "k" not in self.inflight

        result = await get_or_set(self.cache, "k", CountingFetch(["ok"]), inflight=self.inflight)
        assert result == ["ok"]

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_fetch(self) -> None:
        gate = asyncio.Event()

        async def fetch() -> str:
            await gate.wait()
            return "value"

        first = asyncio.create_task(self.inflight.run("k", fetch))
        second = asyncio.create_task(self.inflight.run("k", fetch))
        await asyncio.sleep(0)

        first.cancel()
        await asyncio.sleep(0)
        gate.set()

        assert await second == "value"
        assert first.cancelled()
