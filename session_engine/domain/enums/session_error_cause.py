"""Session error taxonomy (machine-readable).

Every invalid session carries exactly one cause from this closed set,
tagged with a severity. The surrounding web layer translates the pair into
a user-facing message or a re-authentication redirect.

Severity guide:
- INFO: Ordinary client-side condition (no session, expired, garbage id)
- WARN: Suspicious or inconsistent state (bad IP, bad token, broken row)
- ERROR: Server-side failure (store did not accept a write)
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """How serious a session error is."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class SessionErrorCause(str, Enum):
    """Why a session is not valid.

    Values mirror the identifiers exposed to clients and logs.
    """

    MISSING = "missing"
    NO_ID = "no-id"
    MALFORMED_SESSION_ID = "malformed-session-id"
    UNKNOWN_ID = "unknown-id"
    MALFORMED_USER_ID = "malformed-user-id"
    MALFORMED_USER_EMAIL = "malformed-user-email"
    BAD_CREATION_TIME = "bad-creation-time"
    BAD_LAST_ACTIVE_TIME = "bad-last-active-time"
    EXPIRED = "expired"
    INSECURE = "insecure"
    BAD_SECURITY_TOKEN = "bad-security-token"
    BAD_IP = "bad-ip"
    DB_PROBLEM = "db-problem"
    UNKNOWN_ERROR = "unknown-error"
