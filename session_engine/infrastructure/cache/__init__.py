"""Cache infrastructure: memo caches for session lookups."""

from session_engine.infrastructure.cache.memo_cache import TTLMemoCache
from session_engine.infrastructure.cache.noop import NoOpMemoCache

__all__ = ["NoOpMemoCache", "TTLMemoCache"]
