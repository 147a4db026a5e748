"""Session lifecycle service.

Orchestrates the validator, the resolver (cache layer) and the store into
the session life-cycle transitions:

    create   -> new session for an authenticated user
    process  -> validate the session of an incoming request
    prolong  -> extend a session (e.g. after re-authentication)
    delete   -> remove one session / all sessions of a user

Invalid input and invalid sessions never raise: every operation returns a
SessionRecord whose ``valid`` / ``error`` fields describe the outcome.
Store failures (database unreachable) propagate.
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from session_engine.application.request_context import compile_path, some_str
from session_engine.application.services.session_resolver import SessionResolver
from session_engine.domain.entities import Identified, IPAddress, SessionRecord
from session_engine.domain.enums import ErrorSeverity, SessionErrorCause
from session_engine.domain.errors import SessionError
from session_engine.domain.protocols.clock_protocol import Clock
from session_engine.domain.protocols.logger_protocol import LoggerProtocol
from session_engine.domain.protocols.session_store import SessionRow, SessionStore
from session_engine.domain.validators import (
    mark_bad,
    mark_good,
    parse_ip,
    plain_ip_str,
    session_state,
    sid_valid,
    user_email_valid,
    user_id_valid,
)
from session_engine.domain.value_objects import SessionConfig
from session_engine.infrastructure.security import SessionIdGenerator, split_secure_id

MALFORMED_SESSION_ID_REASON = "Malformed session-id parameter"


def _remote(value: Any) -> IPAddress | str | None:
    """Parse a remote address, keeping unparseable values as strings."""
    parsed = parse_ip(value)
    if parsed is not None:
        return parsed
    return some_str(value)


class SessionLifecycle:
    """Create, process, prolong and delete sessions.

    Args:
        config: Session configuration.
        store: Backing store adapter.
        resolver: Cache-aware session resolver.
        generator: Session id generator.
        clock: Time source.
        logger: Structured logger.

    Example:
        >>> lifecycle = create_session_lifecycle()
        >>> record = await lifecycle.create(42, "a@b.com", "1.2.3.4")
        >>> request = {"params": {"session-id": record.id}, "remote_ip": "1.2.3.4"}
        >>> (await lifecycle.process(request)).valid
        True
    """

    def __init__(
        self,
        *,
        config: SessionConfig,
        store: SessionStore,
        resolver: SessionResolver,
        generator: SessionIdGenerator,
        clock: Clock,
        logger: LoggerProtocol,
    ) -> None:
        self._config = config
        self._store = store
        self._resolver = resolver
        self._generator = generator
        self._clock = clock
        self._logger = logger
        self._identify = compile_path(config.id_path)
        self._remote_ip = compile_path(config.remote_ip_path)

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def resolver(self) -> SessionResolver:
        return self._resolver

    def empty(self) -> SessionRecord:
        """Canonical empty record (no session in the request)."""
        return SessionRecord(
            session_key=self._config.session_key,
            id_field=self._config.id_field,
        )

    def _bad(self, record: SessionRecord, error: SessionError) -> SessionRecord:
        return mark_bad(record, error, config=self._config, now=self._clock.now())

    # Create

    async def create(
        self,
        user_id: int | None,
        user_email: str | None,
        ip_address: Any = None,
    ) -> SessionRecord:
        """Open a new session for a user and persist it.

        Args:
            user_id: Authenticated user id.
            user_email: Authenticated user e-mail.
            ip_address: Address the session is bound to.

        Returns:
            Valid record carrying the new public id, or a rejected record
            (malformed-user-id, malformed-user-email, db-problem, ...).
        """
        ip = parse_ip(ip_address)
        ipplain = plain_ip_str(ip)
        log = self._logger.bind(user_id=user_id, user_email=user_email, ip=ipplain)
        base = replace(self.empty(), user_id=user_id, user_email=user_email, ip=ip)

        if not user_id_valid(user_id):
            log.error("No user ID given when creating a session")
            return self._bad(
                base,
                SessionError(
                    severity=ErrorSeverity.INFO,
                    cause=SessionErrorCause.MALFORMED_USER_ID,
                    reason="No user ID given when creating a session",
                ),
            )
        if not user_email_valid(user_email):
            log.error("No user e-mail given when creating a session")
            return self._bad(
                base,
                SessionError(
                    severity=ErrorSeverity.INFO,
                    cause=SessionErrorCause.MALFORMED_USER_EMAIL,
                    reason="No user e-mail given when creating a session",
                ),
            )
        assert user_id is not None

        now = self._clock.now()
        generated = self._generator.generate(self._config.secured, user_id, ipplain)
        record = replace(
            base,
            identity=Identified(generated.public_id),
            db_id=generated.db_id,
            db_token=generated.db_token,
            created=now,
            active=now,
            secure=generated.secure,
            security_passed=generated.secure,
        )
        log = log.bind(db_id=generated.db_id)
        log.info("Opening session")

        error = session_state(record, ip, config=self._config, now=now)
        if error is not None:
            log.error("Session incorrect after creation", cause=error.cause.value)
            return mark_bad(record, error, config=self._config, now=now)

        count = await self._store.upsert_session(self._to_row(record))
        record = replace(record, db_token=None)
        self._resolver.invalidate(generated.public_id, ip)

        if count > 0:
            if self._config.single_session:
                await self._store.delete_user_variables(user_id)
            else:
                await self._store.delete_session_variables(generated.db_id)
            return mark_good(record)

        log.error("Problem saving session")
        return mark_bad(
            record,
            SessionError(
                severity=ErrorSeverity.ERROR,
                cause=SessionErrorCause.DB_PROBLEM,
                reason=f"Session cannot be saved (user {user_id})",
            ),
            config=self._config,
            now=now,
        )

    @staticmethod
    def _to_row(record: SessionRecord) -> SessionRow:
        assert record.db_id is not None
        return SessionRow(
            id=record.db_id,
            user_id=record.user_id,
            user_email=record.user_email,
            secure_token=record.db_token,
            ip=plain_ip_str(record.ip),
            created=record.created,
            active=record.active,
        )

    # Process

    async def process(self, request: Mapping[str, Any]) -> SessionRecord:
        """Validate the session of an incoming request.

        Args:
            request: Request context (see request_context module).

        Returns:
            Empty record when the request carries no session id, otherwise
            the validated (or rejected) session record.
        """
        sid = some_str(self._identify(request))
        if sid is None:
            return self.empty()
        return await self.process_id(sid, self._remote_ip(request))

    async def process_id(self, sid: str, remote_ip: Any = None) -> SessionRecord:
        """Validate a session given its public id and the remote address.

        A malformed id is rejected before any store access. A valid session
        gets its last-active time updated; if the store row vanished the
        outcome degrades to a db-problem error.
        """
        remote = _remote(remote_ip)
        if not sid_valid(sid):
            malformed = replace(
                self.empty(),
                identity=Identified(sid),
                ip=remote if not isinstance(remote, str) else None,
            )
            return self._bad(
                malformed,
                SessionError(
                    severity=ErrorSeverity.INFO,
                    cause=SessionErrorCause.MALFORMED_SESSION_ID,
                    reason=MALFORMED_SESSION_ID_REASON,
                ),
            )

        record = await self._resolver.resolve(sid, remote)
        if not record.valid:
            return record

        assert record.db_id is not None
        now = self._clock.now()
        count = await self._resolver.set_active(sid, record.db_id, remote, now)
        if count > 0:
            return mark_good(replace(record, active=now))

        return self._update_failed(record, remote, now)

    def _update_failed(
        self,
        record: SessionRecord,
        remote: IPAddress | str | None,
        now: datetime,
    ) -> SessionRecord:
        """Reject a session whose last-active update touched no row."""
        self._logger.error(
            "Problem updating session data",
            db_id=record.db_id,
            user_id=record.user_id,
        )
        where = plain_ip_str(record.ip) or (remote if isinstance(remote, str) else None)
        return mark_bad(
            record,
            SessionError(
                severity=ErrorSeverity.ERROR,
                cause=SessionErrorCause.DB_PROBLEM,
                reason=(
                    f"Problem updating session data (user {record.user_id}"
                    f"{f', from {where}' if where else ''})"
                ),
            ),
            config=self._config,
            now=now,
        )

    # Prolong

    async def prolong(
        self,
        record: SessionRecord,
        ip_address: Any = None,
    ) -> SessionRecord:
        """Extend a session by stamping ``active = now`` and re-validating.

        On success the new time is written, cached entries for the old and
        new address are evicted and the session is handled again, flagged
        ``prolonged``. On failure the original record is rejected with the
        validation error, or with a db-problem error when the stored row is
        gone.
        """
        sid = record.err_id or record.id
        if not sid:
            return record

        ip = parse_ip(ip_address) if ip_address is not None else record.ip
        ipplain = plain_ip_str(ip)
        now = self._clock.now()
        log = self._logger.bind(
            db_id=record.db_id,
            user_id=record.user_id,
            user_email=record.user_email,
            ip=ipplain,
        )
        log.info("Prolonging session")

        candidate = replace(record, identity=Identified(sid), active=now)
        error = session_state(candidate, ip, config=self._config, now=now)
        if error is not None:
            log.warning("Session re-validation error", cause=error.cause.value)
            return mark_bad(record, error, config=self._config, now=now)

        db_id = record.db_id or split_secure_id(sid)[0]
        count = await self._resolver.set_active(sid, db_id, ip, now)
        self._resolver.invalidate(sid, ip)
        if ip != record.ip:
            self._resolver.invalidate(sid, record.ip)
        if count == 0:
            return self._update_failed(record, ip, now)
        handled = await self._resolver.handle(sid, ip)
        return replace(handled, prolonged=True)

    # Delete

    def _db_id(self, record: SessionRecord) -> str | None:
        if record.db_id:
            return record.db_id
        sid = record.any_id
        if sid and sid_valid(sid):
            return split_secure_id(sid)[0]
        return None

    async def delete(self, record: SessionRecord) -> bool:
        """Delete a session, its variables and its cached entries.

        Returns:
            True if a stored session was deleted.
        """
        db_id = self._db_id(record)
        if db_id is None:
            self._logger.error(
                "Cannot delete session because session ID is not valid",
                user_id=record.user_id,
            )
            return False

        await self._store.delete_session_variables(db_id)
        deleted = await self._store.delete_session_by_id(db_id)
        self._resolver.invalidate_session(db_id)
        self._logger.info("Session deleted", db_id=db_id, found=deleted is not None)
        return deleted is not None

    async def delete_all(self, user_id: int) -> int:
        """Delete every session of a user with their variables and cache entries.

        Returns:
            Number of sessions deleted.
        """
        if not user_id_valid(user_id):
            self._logger.error("Cannot delete sessions of invalid user", user_id=user_id)
            return 0

        await self._store.delete_user_variables(user_id)
        deleted = await self._store.delete_sessions_by_user(user_id)
        self._resolver.invalidate_user(user_id)
        self._logger.info("User sessions deleted", user_id=user_id, count=len(deleted))
        return len(deleted)
