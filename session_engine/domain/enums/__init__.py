"""Domain enums package."""

from session_engine.domain.enums.session_error_cause import (
    ErrorSeverity,
    SessionErrorCause,
)

__all__ = ["ErrorSeverity", "SessionErrorCause"]
