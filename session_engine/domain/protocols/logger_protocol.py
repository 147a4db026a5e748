"""LoggerProtocol definition for structured logging.

The session engine logs through this protocol only, so it stays
backend-agnostic. Implementations MUST keep logs structured (message plus
key-value context) and MUST NOT emit secrets.

Security:
    - NEVER log session security tokens, their salted hashes, or full
      secure session ids (log ``db_id`` instead)

Usage:
    from session_engine.core.container import get_logger

    logger: LoggerProtocol = get_logger()
    session_logger = logger.bind(db_id=record.db_id, user_id=record.user_id)
    session_logger.info("Session opened")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    Supports DEBUG, INFO, WARNING and ERROR levels and context binding.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message (cache decisions, refresh checks)."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message (session opened, prolonged)."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message (re-validation failures)."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            error: Optional exception instance; implementation may include
                error_type and error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        Original logger instance remains unchanged.
        """
        ...
