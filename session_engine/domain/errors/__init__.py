"""Domain error values."""

from session_engine.domain.errors.session_error import (
    UNKNOWN_ERROR_REASON,
    SessionError,
)

__all__ = ["SessionError", "UNKNOWN_ERROR_REASON"]
