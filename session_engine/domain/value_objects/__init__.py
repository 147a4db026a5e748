"""Domain value objects."""

from session_engine.domain.value_objects.session_config import (
    SessionConfig,
    calculate_cache_margin,
)

__all__ = ["SessionConfig", "calculate_cache_margin"]
