"""Session resolver (cache layer).

Resolves a public session id and a remote address into a validated
SessionRecord, memoizing lookups and keeping memoized records coherent with
the backing store.

Cache key:
    (public session id, remote address string)

    For plain sessions the public id is the db-id. For secure sessions the
    full public id (db-id + token) is used, so a record verified with one
    token is never served for another.

Refresh margin:
    A memoized record may be served for up to ``cache_ttl`` after it was
    read, so its ``active`` timestamp can lag the store by that much.
    ``SessionConfig.cache_margin`` is the point before nominal expiry after
    which the resolver re-reads ``active`` from the store:

    - unchanged              nothing to do
    - changed, same expiry   patch ``active`` inside the cached entry
    - expired -> valid       invalidate and handle again (other node moved it)
    - valid -> expired       patch, invalidate, return a rejected record
"""

from dataclasses import replace
from datetime import datetime
from typing import TypeAlias

from session_engine.domain.entities import Identified, IPAddress, SessionRecord
from session_engine.domain.protocols.clock_protocol import Clock
from session_engine.domain.protocols.logger_protocol import LoggerProtocol
from session_engine.domain.protocols.memo_cache import MemoCache
from session_engine.domain.protocols.session_store import SessionRow, SessionStore
from session_engine.domain.validators import (
    mark_bad,
    mark_good,
    parse_ip,
    plain_ip_str,
    session_state,
)
from session_engine.domain.value_objects import SessionConfig
from session_engine.infrastructure.cache import NoOpMemoCache
from session_engine.infrastructure.security import SecureTokenHasher, split_secure_id

CacheKey: TypeAlias = tuple[str, str | None]
TokenKey: TypeAlias = tuple[str, str]


def ip_key(remote_ip: IPAddress | str | None) -> str | None:
    """Normalize a remote address for use in cache keys."""
    if remote_ip is None:
        return None
    if isinstance(remote_ip, str):
        parsed = parse_ip(remote_ip)
        return plain_ip_str(parsed) if parsed is not None else remote_ip
    return plain_ip_str(remote_ip)


class SessionResolver:
    """Memoized session lookup with margin-based revalidation.

    Args:
        config: Session configuration.
        store: Backing store adapter.
        hasher: Secure token hasher.
        clock: Time source.
        logger: Structured logger.
        cache: Session record cache (no-op when omitted).
        token_cache: Token verification cache (no-op when omitted).
    """

    def __init__(
        self,
        *,
        config: SessionConfig,
        store: SessionStore,
        hasher: SecureTokenHasher,
        clock: Clock,
        logger: LoggerProtocol,
        cache: MemoCache[CacheKey, SessionRecord] | None = None,
        token_cache: MemoCache[TokenKey, bool] | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._hasher = hasher
        self._clock = clock
        self._logger = logger
        self._cache: MemoCache[CacheKey, SessionRecord] = (
            cache if cache is not None else NoOpMemoCache()
        )
        self._token_cache: MemoCache[TokenKey, bool] = (
            token_cache if token_cache is not None else NoOpMemoCache()
        )

    @property
    def cache(self) -> MemoCache[CacheKey, SessionRecord]:
        return self._cache

    @staticmethod
    def cache_key(sid: str, remote_ip: IPAddress | str | None) -> CacheKey:
        return (sid, ip_key(remote_ip))

    # Handling

    async def handle(self, sid: str, remote_ip: IPAddress | str | None) -> SessionRecord:
        """Fetch, verify and validate a session (memoized)."""
        return await self._cache.get_or_compute(
            self.cache_key(sid, remote_ip),
            lambda: self._handle_uncached(sid, remote_ip),
        )

    async def _handle_uncached(
        self, sid: str, remote_ip: IPAddress | str | None
    ) -> SessionRecord:
        db_id, token = split_secure_id(sid)
        secure = bool(token)
        row = await self._store.fetch_by_id(db_id)
        token_ok = False
        if secure and token is not None:
            token_ok = await self._token_ok(token, row.secure_token if row else None)

        record = self._from_row(row, sid=sid, db_id=db_id)
        record = replace(record, secure=secure, security_passed=token_ok)
        now = self._clock.now()
        error = session_state(record, remote_ip, config=self._config, now=now)
        if error is not None:
            return mark_bad(record, error, config=self._config, now=now)
        return mark_good(record)

    async def _token_ok(self, token: str, salted_hash: str | None) -> bool:
        if not token or not salted_hash:
            return False

        async def verify() -> bool:
            return self._hasher.verify(token, salted_hash)

        return await self._token_cache.get_or_compute((token, salted_hash), verify)

    def _from_row(self, row: SessionRow | None, *, sid: str, db_id: str) -> SessionRecord:
        base = SessionRecord(
            identity=Identified(sid),
            db_id=db_id,
            session_key=self._config.session_key,
            id_field=self._config.id_field,
        )
        if row is None:
            return base
        return replace(
            base,
            user_id=row.user_id,
            user_email=row.user_email,
            created=row.created,
            active=row.active,
            ip=parse_ip(row.ip),
        )

    # Refresh

    def needs_refresh(
        self,
        key: CacheKey,
        last_active: datetime | None,
        expired: bool,
    ) -> bool:
        """Decide whether a memoized record must be re-checked against the store.

        True when (a) the record is not expired and it was inactive for longer
        than the cache margin, or (b) the cache entry is older than
        ``min(expires, margin)``.
        """
        margin = self._config.cache_margin
        if margin is None or last_active is None:
            return False

        now = self._clock.now()
        if not expired and now - last_active > margin:
            self._logger.debug("Session margin exceeded", margin=str(margin))
            return True

        expires = self._config.expires
        ttl_margin = min(expires, margin) if expires else margin
        age = self._cache.entry_age(key)
        if age is not None and age > ttl_margin:
            self._logger.debug("Cache TTL margin exceeded", margin=str(ttl_margin))
            return True
        return False

    async def resolve(self, sid: str, remote_ip: IPAddress | str | None) -> SessionRecord:
        """Handle a session and apply the refresh-margin logic."""
        record = await self.handle(sid, remote_ip)
        key = self.cache_key(sid, remote_ip)
        active = record.active
        expired = record.expired
        now = self._clock.now()

        if not self.needs_refresh(key, active, expired) or not record.db_id:
            return record

        self._logger.debug("Reading last active time", db_id=record.db_id)
        fresh_active = await self._store.get_last_active(record.db_id)
        if fresh_active is None or fresh_active == active:
            if not expired and self._config.is_expired(active, now):
                self._logger.debug(
                    "Session expiry detected after recalculating times",
                    db_id=record.db_id,
                )
                self.invalidate(sid, remote_ip)
                return self._reject(record, remote_ip, now)
            return record

        fresh_expired = self._config.is_expired(fresh_active, now)
        if fresh_expired == expired:
            self._logger.debug("Updating active time", db_id=record.db_id)
            self._cache.patch(key, active=fresh_active)
            return replace(record, active=fresh_active)

        if expired:
            self._logger.debug(
                "Session no longer expired, handling again", db_id=record.db_id
            )
            self.invalidate(sid, remote_ip)
            return await self.handle(sid, remote_ip)

        self._logger.debug(
            "Session expired after syncing last active time", db_id=record.db_id
        )
        record = replace(record, active=fresh_active)
        self._cache.patch(key, active=fresh_active)
        self.invalidate(sid, remote_ip)
        return self._reject(record, remote_ip, now)

    def _reject(
        self,
        record: SessionRecord,
        remote_ip: IPAddress | str | None,
        now: datetime,
    ) -> SessionRecord:
        # A cached verdict may already be a rejection (err_id only)
        candidate = replace(record, identity=Identified(record.any_id))
        error = session_state(candidate, remote_ip, config=self._config, now=now)
        return mark_bad(record, error, config=self._config, now=now)

    # Store reads and writes

    async def get_last_active(self, db_id: str) -> datetime | None:
        """Read the last activity time straight from the store."""
        return await self._store.get_last_active(db_id)

    async def set_active(
        self,
        sid: str,
        db_id: str,
        remote_ip: IPAddress | str | None,
        active: datetime | None = None,
    ) -> int:
        """Record activity: patch the cached entry, then write the store.

        Returns:
            Rows affected by the store update.
        """
        active = active or self._clock.now()
        self._cache.patch(self.cache_key(sid, remote_ip), active=active)
        return await self._store.update_last_active(db_id, active)

    # Invalidation

    def invalidate(self, sid: str, remote_ip: IPAddress | str | None) -> bool:
        """Evict the cached record for (sid, remote address)."""
        return self._cache.invalidate(self.cache_key(sid, remote_ip))

    def invalidate_session(self, db_id: str) -> int:
        """Evict every cached record of one stored session."""
        return self._cache.invalidate_where(lambda _key, record: record.db_id == db_id)

    def invalidate_user(self, user_id: int) -> int:
        """Evict every cached record of one user."""
        return self._cache.invalidate_where(
            lambda _key, record: record.user_id == user_id
        )
