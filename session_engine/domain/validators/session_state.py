"""Session state machine.

``session_state`` classifies a candidate SessionRecord as good (``None``)
or returns the first SessionError found. Checks run in a fixed order and
short-circuit; the order decides which diagnostic the caller sees:

     1. missing                (info)   no record at all
     2. no-id                  (info)   neither id nor err_id
     3. malformed-session-id   (info)   id fails the format check
     4. unknown-id             (info)   no user identity at all
     5. unknown-id             (info)   only err_id present
     6. malformed-user-id      (info)
     7. malformed-user-email   (info)
     8. bad-creation-time      (warn)
     9. bad-last-active-time   (warn)
    10. expired                (info)   now - active > expires
    11. insecure               (warn)   secured mode, record not secure
    12. bad-security-token     (warn)   token present but not verified
    13. bad-ip                 (warn)   remote address differs

``mark_good`` / ``mark_bad`` turn the verdict into a new record. The
``allow_*`` helpers give an expired session a temporary grace period
(e.g. to render a re-login form bound to the old session).

All functions are pure: time comes in as ``now``.
"""

from dataclasses import replace
from datetime import datetime

from session_engine.domain.entities import (
    EMPTY_IDENTITY,
    Errored,
    Identified,
    IPAddress,
    SessionRecord,
)
from session_engine.domain.enums import ErrorSeverity, SessionErrorCause
from session_engine.domain.errors import UNKNOWN_ERROR_REASON, SessionError
from session_engine.domain.validators.functions import (
    db_id_part,
    parse_ip,
    plain_ip_str,
    same_address,
    sid_valid,
    timestamp_valid,
    to_v4,
    to_v6,
    user_email_valid,
    user_id_valid,
)
from session_engine.domain.value_objects import SessionConfig


def _for_user(
    user_id: object = None,
    user_email: object = None,
    ip: IPAddress | str | None = None,
) -> str:
    parts = []
    if user_id is not None:
        parts.append(f"user {user_id}")
    if user_email:
        parts.append(f"<{user_email}>")
    if ip is not None:
        parts.append(f"from {plain_ip_str(ip) if not isinstance(ip, str) else ip}")
    return f" ({', '.join(parts)})" if parts else ""


def _error(severity: ErrorSeverity, cause: SessionErrorCause, reason: str) -> SessionError:
    return SessionError(severity=severity, cause=cause, reason=reason)


def ip_state(
    record: SessionRecord,
    remote_ip: IPAddress | str | None,
) -> SessionError | None:
    """Check that the remote address matches the address bound to the session.

    Skipped when the session has no bound address or the remote address is
    unknown. A remote value which is not an IP address is compared by its
    string form against the plain, IPv4 and IPv6 renderings of the session
    address.
    """
    session_ip = record.ip
    if session_ip is None or remote_ip is None:
        return None

    for_user = _for_user(record.user_id, record.user_email)
    remote_addr = parse_ip(remote_ip)
    if remote_addr is not None:
        if same_address(remote_addr, session_ip):
            return None
        return _error(
            ErrorSeverity.WARN,
            SessionErrorCause.BAD_IP,
            f"Session IP address ({plain_ip_str(session_ip)}) is different than "
            f"the remote IP address ({plain_ip_str(remote_addr)}){for_user}",
        )

    remote_str = str(remote_ip).strip()
    v4 = to_v4(session_ip)
    candidates = {str(session_ip), str(to_v6(session_ip))}
    if v4 is not None:
        candidates.add(str(v4))
    if remote_str in candidates:
        return None
    return _error(
        ErrorSeverity.WARN,
        SessionErrorCause.BAD_IP,
        f"Session IP string ({plain_ip_str(session_ip)}) is different than "
        f"the remote IP string ({remote_str}){for_user}",
    )


def session_state(
    record: SessionRecord | None,
    remote_ip: IPAddress | str | None,
    *,
    config: SessionConfig,
    now: datetime,
) -> SessionError | None:
    """Return the first problem found with a session, or None if it is good.

    Args:
        record: Candidate session record (None means no session).
        remote_ip: Address the current request came from.
        config: Session configuration (expiry, secured mode).
        now: Current time.

    Returns:
        SessionError describing the first failed check, or None.
    """
    if record is None:
        return _error(ErrorSeverity.INFO, SessionErrorCause.MISSING, "No session")

    sid = record.id
    any_sid = record.any_id
    user_id = record.user_id
    user_email = record.user_email
    for_user = _for_user(user_id, user_email, remote_ip)

    if not any_sid:
        return _error(
            ErrorSeverity.INFO, SessionErrorCause.NO_ID, f"No session ID{for_user}"
        )
    if not sid_valid(any_sid):
        return _error(
            ErrorSeverity.INFO,
            SessionErrorCause.MALFORMED_SESSION_ID,
            f"Malformed session ID{for_user}",
        )
    if user_id is None and not user_email:
        return _error(
            ErrorSeverity.INFO,
            SessionErrorCause.UNKNOWN_ID,
            f"Unknown session ID {db_id_part(any_sid)}{for_user}",
        )
    if not sid:
        return _error(
            ErrorSeverity.INFO,
            SessionErrorCause.UNKNOWN_ID,
            f"Unknown session ID {db_id_part(any_sid)}{for_user}",
        )
    if not user_id_valid(user_id):
        return _error(
            ErrorSeverity.INFO,
            SessionErrorCause.MALFORMED_USER_ID,
            f"User ID not found or malformed{for_user}",
        )
    if not user_email_valid(user_email):
        return _error(
            ErrorSeverity.INFO,
            SessionErrorCause.MALFORMED_USER_EMAIL,
            f"User e-mail not found or malformed{for_user}",
        )
    if not timestamp_valid(record.created):
        return _error(
            ErrorSeverity.WARN,
            SessionErrorCause.BAD_CREATION_TIME,
            f"No creation time{for_user}",
        )
    if not timestamp_valid(record.active):
        return _error(
            ErrorSeverity.WARN,
            SessionErrorCause.BAD_LAST_ACTIVE_TIME,
            f"No last active time{for_user}",
        )
    if config.is_expired(record.active, now):
        return _error(
            ErrorSeverity.INFO, SessionErrorCause.EXPIRED, f"Session expired{for_user}"
        )
    if config.secured and not record.secure:
        return _error(
            ErrorSeverity.WARN,
            SessionErrorCause.INSECURE,
            f"Session not secured with encrypted token{for_user}",
        )
    if record.secure and not record.security_passed:
        return _error(
            ErrorSeverity.WARN,
            SessionErrorCause.BAD_SECURITY_TOKEN,
            f"Bad session security token{for_user}",
        )
    return ip_state(record, remote_ip)


def is_correct(
    record: SessionRecord | None,
    remote_ip: IPAddress | str | None,
    *,
    config: SessionConfig,
    now: datetime,
) -> bool:
    """Return True if the session exists and its state is correct."""
    return session_state(record, remote_ip, config=config, now=now) is None


def mark_good(record: SessionRecord) -> SessionRecord:
    """Mark a session as valid.

    Promotes err_id into id when the session was previously rejected and
    clears error and expiry flags. Idempotent.
    """
    sid = record.any_id
    return replace(
        record,
        identity=Identified(sid) if sid else EMPTY_IDENTITY,
        valid=True,
        expired=False,
        hard_expired=False,
        error=None,
    )


def _normalize_error(error: SessionError | None) -> SessionError:
    if error is None:
        return SessionError.unknown()
    if error.cause is SessionErrorCause.UNKNOWN_ERROR and not error.reason:
        return replace(error, reason=UNKNOWN_ERROR_REASON)
    return error


def mark_bad(
    record: SessionRecord,
    error: SessionError | None = None,
    *,
    config: SessionConfig,
    now: datetime,
) -> SessionRecord:
    """Mark a session as invalid.

    Moves the identifier into err_id and derives expired / hard_expired
    from the error cause. An ``expired`` cause always counts as expiry, a
    ``bad-ip`` cause counts when ``config.bad_ip_expires`` is set.

    Calling it again without a new error on an already rejected record
    returns the record unchanged.

    Args:
        record: Session record to reject.
        error: Why the session is rejected (falls back to record.error, then
            to an ``unknown-error``).
        config: Session configuration.
        now: Current time (for the hard expiry comparison).

    Returns:
        New rejected SessionRecord.
    """
    if error is None and not record.valid and record.error is not None:
        return record

    error = _normalize_error(error if error is not None else record.error)
    expired = error.cause is SessionErrorCause.EXPIRED or (
        error.cause is SessionErrorCause.BAD_IP and config.bad_ip_expires
    )
    hard_expired = expired and config.is_hard_expired(record.active, now)
    sid = record.any_id

    return replace(
        record,
        identity=Errored(sid) if sid else EMPTY_IDENTITY,
        valid=False,
        expired=expired,
        hard_expired=hard_expired,
        error=error,
    )


def allow_expired(record: SessionRecord) -> SessionRecord:
    """Temporarily mark an expired session as valid.

    The returned record keeps its expiry flags and error so callers can still
    tell it is a grace-period session.
    """
    if record.expired and not record.valid and record.err_id is not None:
        return replace(record, identity=Identified(record.err_id), valid=True)
    return record


def allow_soft_expired(record: SessionRecord) -> SessionRecord:
    """Temporarily mark a soft-expired session as valid."""
    if record.hard_expired:
        return record
    return allow_expired(record)


def allow_hard_expired(record: SessionRecord) -> SessionRecord:
    """Temporarily mark a hard-expired session as valid."""
    if record.hard_expired:
        return allow_expired(record)
    return record
