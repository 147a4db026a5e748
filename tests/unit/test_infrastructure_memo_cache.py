"""Unit tests for TTLMemoCache and NoOpMemoCache.

Tests cover:
- Hit / miss behavior and TTL expiry
- Size bound (oldest entry evicted)
- Single computation for concurrent misses (stampede protection)
- Invalidation during a computation
- Patch keeps entry age
- Exceptions propagate and nothing is stored
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta

import pytest

from session_engine.infrastructure.cache import NoOpMemoCache, TTLMemoCache


@dataclass(frozen=True)
class Item:
    name: str
    count: int = 0


@pytest.fixture
def cache(clock):
    return TTLMemoCache(ttl=timedelta(minutes=2), maxsize=3, clock=clock)


def counting(value):
    """Build a compute function that counts its calls."""
    calls = []

    async def compute():
        calls.append(1)
        return value

    return compute, calls


@pytest.mark.unit
class TestTTLMemoCacheBasics:
    """Test get_or_compute hits, misses and expiry."""

    async def test_computes_once_then_hits(self, cache):
        compute, calls = counting(Item("a"))

        first = await cache.get_or_compute("k", compute)
        second = await cache.get_or_compute("k", compute)

        assert first == second == Item("a")
        assert len(calls) == 1

    async def test_entry_expires_after_ttl(self, cache, clock):
        compute, calls = counting(Item("a"))

        await cache.get_or_compute("k", compute)
        clock.advance(minutes=2)
        await cache.get_or_compute("k", compute)

        assert len(calls) == 2

    async def test_entry_alive_before_ttl(self, cache, clock):
        await cache.get_or_compute("k", counting(Item("a"))[0])
        clock.advance(minutes=1, seconds=59)

        assert cache.get("k") == Item("a")

    def test_oldest_entry_evicted(self, cache):
        for key in ("a", "b", "c", "d"):
            cache.put(key, Item(key))

        assert len(cache) == 3
        assert cache.get("a") is None
        assert cache.get("d") == Item("d")

    async def test_exception_propagates_and_is_not_cached(self, cache):
        async def boom():
            raise RuntimeError("database down")

        with pytest.raises(RuntimeError, match="database down"):
            await cache.get_or_compute("k", boom)

        assert cache.get("k") is None

    def test_invalid_construction(self, clock):
        with pytest.raises(ValueError, match="ttl"):
            TTLMemoCache(ttl=timedelta(0), maxsize=1, clock=clock)
        with pytest.raises(ValueError, match="maxsize"):
            TTLMemoCache(ttl=timedelta(seconds=1), maxsize=0, clock=clock)


@pytest.mark.unit
class TestTTLMemoCacheConcurrency:
    """Test stampede protection and invalidation races."""

    async def test_concurrent_misses_share_one_computation(self, cache):
        calls = []
        release = asyncio.Event()

        async def slow():
            calls.append(1)
            await release.wait()
            return Item("slow")

        tasks = [asyncio.create_task(cache.get_or_compute("k", slow)) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert len(calls) == 1
        assert all(result == Item("slow") for result in results)

    async def test_value_computed_across_invalidation_not_stored(self, cache):
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return Item("stale")

        task = asyncio.create_task(cache.get_or_compute("k", slow))
        await asyncio.sleep(0)
        cache.invalidate("k")
        release.set()

        assert await task == Item("stale")
        assert cache.get("k") is None

    async def test_locks_released_after_computation(self, cache):
        await cache.get_or_compute("k", counting(Item("a"))[0])

        assert cache._locks == {}
        assert cache._lock_users == {}


@pytest.mark.unit
class TestTTLMemoCacheMutation:
    """Test invalidate, invalidate_where, patch and entry_age."""

    def test_invalidate(self, cache):
        cache.put("k", Item("a"))

        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False
        assert cache.get("k") is None

    def test_invalidate_where(self, cache):
        cache.put("a", Item("x", 1))
        cache.put("b", Item("y", 1))
        cache.put("c", Item("x", 2))

        removed = cache.invalidate_where(lambda _key, item: item.name == "x")

        assert removed == 2
        assert cache.get("b") == Item("y", 1)

    def test_patch_keeps_age(self, cache, clock):
        cache.put("k", Item("a", 1))
        clock.advance(seconds=30)

        patched = cache.patch("k", count=5)

        assert patched == Item("a", 5)
        assert cache.get("k") == Item("a", 5)
        assert cache.entry_age("k") == timedelta(seconds=30)

    def test_patch_missing_entry(self, cache):
        assert cache.patch("k", count=5) is None

    def test_clear(self, cache):
        cache.put("a", Item("a"))
        cache.clear()

        assert len(cache) == 0


@pytest.mark.unit
class TestNoOpMemoCache:
    """Test the cache used when caching is disabled."""

    async def test_always_computes(self):
        cache = NoOpMemoCache()
        compute, calls = counting(Item("a"))

        await cache.get_or_compute("k", compute)
        await cache.get_or_compute("k", compute)

        assert len(calls) == 2
        assert len(cache) == 0

    def test_mutations_are_noops(self):
        cache = NoOpMemoCache()
        cache.put("k", Item("a"))

        assert cache.get("k") is None
        assert cache.invalidate("k") is False
        assert cache.invalidate_where(lambda _k, _v: True) == 0
        assert cache.patch("k", count=1) is None
        assert cache.entry_age("k") is None
