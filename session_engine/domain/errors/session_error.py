"""Session error value.

SessionError describes why a session was rejected. Like the rest of the
error values in this codebase it does NOT inherit from Exception: it is
never raised, it is attached to the SessionRecord returned to the caller.

Usage:
    from session_engine.domain.errors import SessionError

    error = SessionError(
        severity=ErrorSeverity.WARN,
        cause=SessionErrorCause.BAD_IP,
        reason="Session IP address (1.2.3.4) is different than the remote IP address (9.9.9.9)",
    )
"""

from dataclasses import dataclass

from session_engine.domain.enums import ErrorSeverity, SessionErrorCause

UNKNOWN_ERROR_REASON = "Unknown session error"


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionError:
    """Typed, severity-tagged session diagnostic.

    Attributes:
        severity: How serious the problem is.
        cause: Machine-readable cause from the closed taxonomy.
        reason: Human-readable diagnostic (safe to log, never contains tokens).
    """

    severity: ErrorSeverity
    cause: SessionErrorCause
    reason: str = ""

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.cause.value}: {self.reason}"

    @classmethod
    def unknown(cls, reason: str | None = None) -> "SessionError":
        """Build the fallback error used when no cause is known."""
        return cls(
            severity=ErrorSeverity.WARN,
            cause=SessionErrorCause.UNKNOWN_ERROR,
            reason=reason or UNKNOWN_ERROR_REASON,
        )
