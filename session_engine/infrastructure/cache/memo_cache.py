"""In-process TTL memo cache.

Concrete implementation of the MemoCache protocol used for session lookups
and secure token verifications.

Design:
    - Entries expire ``ttl`` after they were stored (lazy, checked on access)
    - Bounded size, oldest entry evicted first
    - Hits never take a lock
    - Concurrent misses on one key share a single computation (per-key
      asyncio.Lock)
    - A value computed while the cache was invalidated is returned to its
      caller but not stored
    - ``patch`` swaps the stored value in one synchronous step, keeping the
      entry's age

Note:
    Single process only. Each worker keeps its own cache; the session
    resolver's refresh margin bounds how stale a worker's view can be.
"""

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from session_engine.domain.protocols.clock_protocol import Clock

K = TypeVar("K")
V = TypeVar("V")


@dataclass(slots=True)
class _Entry(Generic[V]):
    value: V
    stored_at: datetime


class TTLMemoCache(Generic[K, V]):
    """Memoizing cache with TTL, max size and stampede protection.

    Note: Does NOT inherit from MemoCache protocol (uses structural typing).

    Usage:
        cache: TTLMemoCache[tuple[str, str], SessionRecord] = TTLMemoCache(
            ttl=timedelta(minutes=2), maxsize=2048, clock=SystemClock()
        )
        record = await cache.get_or_compute(key, lambda: load(key))
    """

    def __init__(self, *, ttl: timedelta, maxsize: int, clock: Clock) -> None:
        """Initialize cache.

        Args:
            ttl: Entry lifetime.
            maxsize: Maximum number of entries.
            clock: Time source.

        Raises:
            ValueError: If ttl is not positive or maxsize < 1.
        """
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._ttl = ttl
        self._maxsize = maxsize
        self._clock = clock
        self._entries: OrderedDict[K, _Entry[V]] = OrderedDict()
        self._locks: dict[K, asyncio.Lock] = {}
        self._lock_users: dict[K, int] = {}
        self._epoch = 0

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _live(self, key: K) -> _Entry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock.now() - entry.stored_at >= self._ttl:
            del self._entries[key]
            return None
        return entry

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value, computing it once on a miss.

        Exceptions raised by ``compute`` propagate and nothing is stored.
        """
        entry = self._live(key)
        if entry is not None:
            return entry.value

        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                entry = self._live(key)
                if entry is not None:
                    return entry.value
                epoch = self._epoch
                value = await compute()
                if epoch == self._epoch:
                    self.put(key, value)
                return value
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    def get(self, key: K) -> V | None:
        entry = self._live(key)
        return None if entry is None else entry.value

    def put(self, key: K, value: V) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock.now())
        self._entries.move_to_end(key)
        while len(self._entries) > self._maxsize:
            self._entries.popitem(last=False)

    def invalidate(self, key: K) -> bool:
        self._epoch += 1
        return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[K, V], bool]) -> int:
        """Evict all entries for which ``predicate(key, value)`` is true."""
        self._epoch += 1
        doomed = [k for k, e in self._entries.items() if predicate(k, e.value)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def patch(self, key: K, **fields: Any) -> V | None:
        """Replace fields of a cached dataclass value in place of the old one."""
        entry = self._live(key)
        if entry is None:
            return None
        entry.value = replace(entry.value, **fields)  # type: ignore[type-var]
        return entry.value

    def entry_age(self, key: K) -> timedelta | None:
        entry = self._live(key)
        if entry is None:
            return None
        return self._clock.now() - entry.stored_at

    def clear(self) -> None:
        self._epoch += 1
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
