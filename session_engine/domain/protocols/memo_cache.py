"""Memoizing cache protocol (port).

Contract a session lookup cache must satisfy:

- Concurrent reads never block each other.
- At most one computation is in flight per key under concurrent misses.
- ``patch`` replaces fields of a stored entry in one step, without holding
  a lock across the (separately performed) store read that produced them.
- Expiry is lazy: an entry is checked when accessed.

Values stored are dataclass instances (``patch`` uses ``dataclasses.replace``).
Callers always receive immutable values, never a reference to mutable
cache internals.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, Protocol, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class MemoCache(Protocol[K, V]):
    """Memoizing cache port.

    Implementations:
        - TTLMemoCache: TTL + bounded size, per-key stampede protection
        - NoOpMemoCache: always computes, maintenance verbs do nothing
    """

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value for key, computing and storing it on a miss."""
        ...

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if absent or expired."""
        ...

    def put(self, key: K, value: V) -> None:
        """Store a value (resets its age)."""
        ...

    def invalidate(self, key: K) -> bool:
        """Evict one entry. Returns True if something was evicted."""
        ...

    def invalidate_where(self, predicate: Callable[[K, V], bool]) -> int:
        """Evict every entry matching predicate. Returns the eviction count."""
        ...

    def patch(self, key: K, **fields: Any) -> V | None:
        """Replace fields of a stored entry, keeping its age.

        Returns:
            The patched value, or None when the key is not cached.
        """
        ...

    def entry_age(self, key: K) -> timedelta | None:
        """Time elapsed since the entry was stored, None if not cached."""
        ...

    def clear(self) -> None:
        """Evict everything."""
        ...

    def __len__(self) -> int:
        ...
