"""Session engine configuration.

SessionConfig is constructed once at service start (usually through
``SessionSettings.to_session_config()``) and passed by dependency injection
into the resolver, lifecycle, and variables services. It never changes for
the lifetime of the process.

Example:
    >>> config = SessionConfig(
    ...     expires=timedelta(minutes=10),
    ...     cache_ttl=timedelta(minutes=2),
    ... )
    >>> config.cache_margin
    datetime.timedelta(seconds=480)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

DEFAULT_ID_PATH: tuple[str, ...] = ("params", "session-id")
DEFAULT_REMOTE_IP_PATH: tuple[str, ...] = ("remote_ip",)


def _positive(value: timedelta | None) -> bool:
    return value is not None and value > timedelta(0)


def calculate_cache_margin(
    expires: timedelta | None,
    cache_ttl: timedelta | None,
) -> timedelta | None:
    """Calculate the buffer before expiry at which a cached record is re-read.

    A cached entry may be served for up to ``cache_ttl`` after it was read,
    so the cached ``active`` timestamp cannot be trusted all the way up to
    ``expires``.

    Args:
        expires: Session inactivity timeout.
        cache_ttl: Time-to-live of cached session records.

    Returns:
        Margin duration, or None when either duration is unset or non-positive.
    """
    if not (_positive(expires) and _positive(cache_ttl)):
        return None
    assert expires is not None and cache_ttl is not None
    if expires > cache_ttl * 2:
        return expires - cache_ttl
    if expires > cache_ttl:
        return cache_ttl
    if cache_ttl > expires * 2:
        return expires
    return cache_ttl - expires


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionConfig:
    """Session engine configuration.

    Attributes:
        sessions_table: Name of the sessions table.
        variables_table: Name of the session variables table.
        session_key: Key under which a session record is stored in a request context.
        id_path: Path into the request context where the session id is found.
        id_field: Name of the session id parameter (defaults to last id_path element).
        remote_ip_path: Path into the request context where the remote IP is found.
        expires: Inactivity timeout (None means sessions never expire).
        hard_expires: Longer inactivity threshold for hard expiry.
        cache_ttl: TTL of memoized session lookups (None disables caching).
        cache_size: Maximum number of memoized session lookups.
        token_cache_ttl: TTL of memoized secure token verifications.
        token_cache_size: Maximum number of memoized token verifications.
        secured: Whether a secure token is mandatory.
        single_session: Whether a user may hold only one session at a time.
        bad_ip_expires: Treat an IP mismatch as an expiry for display purposes.
        cache_margin: Derived, see calculate_cache_margin().
    """

    sessions_table: str = "sessions"
    variables_table: str = "session_variables"
    session_key: str = "session"
    id_path: tuple[str, ...] = DEFAULT_ID_PATH
    id_field: str | None = None
    remote_ip_path: tuple[str, ...] = DEFAULT_REMOTE_IP_PATH

    expires: timedelta | None = timedelta(minutes=15)
    hard_expires: timedelta | None = timedelta(minutes=30)
    cache_ttl: timedelta | None = timedelta(minutes=2)
    cache_size: int = 2048
    token_cache_ttl: timedelta | None = timedelta(minutes=5)
    token_cache_size: int = 1024

    secured: bool = False
    single_session: bool = False
    bad_ip_expires: bool = False

    cache_margin: timedelta | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Validate configuration and derive computed fields.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.sessions_table or not self.variables_table:
            raise ValueError("table names must not be empty")
        if not self.session_key:
            raise ValueError("session_key must not be empty")
        if not self.id_path:
            raise ValueError("id_path must contain at least one element")
        if not self.remote_ip_path:
            raise ValueError("remote_ip_path must contain at least one element")
        for name in ("expires", "hard_expires", "cache_ttl", "token_cache_ttl"):
            value = getattr(self, name)
            if value is not None and value < timedelta(0):
                raise ValueError(f"{name} must not be negative")
        if self.cache_size < 1:
            raise ValueError("cache_size must be at least 1")
        if self.token_cache_size < 1:
            raise ValueError("token_cache_size must be at least 1")

        # Frozen dataclass: derived fields are set through object.__setattr__
        object.__setattr__(self, "id_path", tuple(self.id_path))
        object.__setattr__(self, "remote_ip_path", tuple(self.remote_ip_path))
        if self.id_field is None:
            object.__setattr__(self, "id_field", self.id_path[-1])
        object.__setattr__(
            self, "cache_margin", calculate_cache_margin(self.expires, self.cache_ttl)
        )

    @property
    def caching_enabled(self) -> bool:
        """Whether session lookups are memoized."""
        return _positive(self.cache_ttl)

    def is_expired(self, active: datetime | None, now: datetime) -> bool:
        """Check whether a session last active at ``active`` has expired.

        A missing or non-positive ``expires`` means sessions never expire.
        """
        if active is None or not _positive(self.expires):
            return False
        assert self.expires is not None
        return now - active > self.expires

    def is_hard_expired(self, active: datetime | None, now: datetime) -> bool:
        """Check whether a session last active at ``active`` is hard-expired."""
        if active is None or not _positive(self.hard_expires):
            return False
        assert self.hard_expires is not None
        return now - active > self.hard_expires
