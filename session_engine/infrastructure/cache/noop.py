"""No-op memo cache.

Substituted when caching is disabled (no ``cache_ttl``) so callers can
invalidate and patch unconditionally.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class NoOpMemoCache(Generic[K, V]):
    """Cache that never stores anything.

    Note: Does NOT inherit from MemoCache protocol (uses structural typing).
    """

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        return await compute()

    def get(self, key: K) -> V | None:
        return None

    def put(self, key: K, value: V) -> None:
        pass

    def invalidate(self, key: K) -> bool:
        return False

    def invalidate_where(self, predicate: Callable[[K, V], bool]) -> int:
        return 0

    def patch(self, key: K, **fields: Any) -> V | None:
        return None

    def entry_age(self, key: K) -> timedelta | None:
        return None

    def clear(self) -> None:
        pass

    def __len__(self) -> int:
        return 0
