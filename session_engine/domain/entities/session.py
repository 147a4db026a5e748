"""Session record domain entity.

Pure data, no framework dependencies. A SessionRecord is replaced, never
mutated: every validation step returns a new value built with
``dataclasses.replace``.

Identity is a tagged union instead of two nullable fields:

    Identified(id)      the session is (or is about to be) valid
    Errored(err_id)     the session was rejected, err_id kept for diagnostics
    EmptyIdentity()     nothing was looked up yet (canonical empty record)

This makes "id and err_id are never both set" a property of the type.
"""

from dataclasses import dataclass
from datetime import datetime
from ipaddress import IPv4Address, IPv6Address
from typing import TypeAlias

from session_engine.domain.errors import SessionError

IPAddress: TypeAlias = IPv4Address | IPv6Address


@dataclass(frozen=True, slots=True)
class Identified:
    """Session identified by its current public id."""

    id: str


@dataclass(frozen=True, slots=True)
class Errored:
    """Session rejected, last known public id retained."""

    err_id: str


@dataclass(frozen=True, slots=True)
class EmptyIdentity:
    """No identifier at all."""


EMPTY_IDENTITY = EmptyIdentity()

SessionIdentity: TypeAlias = Identified | Errored | EmptyIdentity


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionRecord:
    """Session record with derived validity flags.

    Business Rules:
        - valid implies error is None and id is not None
        - expired implies not valid
        - db_token is cleared right after the security token was checked

    Attributes:
        identity: Identified / Errored / EmptyIdentity.
        db_id: Primary key in the backing store (public id without token).
        db_token: Salted hash of the security token (transient).
        user_id: Owner user id.
        user_email: Owner e-mail address.
        created: Creation time.
        active: Last observed activity time.
        ip: Address the session is bound to.
        valid: Whether the session passed validation.
        expired: Whether the session is expired (soft or hard).
        hard_expired: Whether the session exceeded the hard expiry threshold.
        secure: Whether the session carries a security token.
        security_passed: Whether the security token verified.
        prolonged: Set only by the prolong operation.
        session_key: Request context key the record is exposed under.
        id_field: Name of the session id parameter.
        error: Why the session is not valid (None when valid).
    """

    identity: SessionIdentity = EMPTY_IDENTITY
    db_id: str | None = None
    db_token: str | None = None
    user_id: int | None = None
    user_email: str | None = None
    created: datetime | None = None
    active: datetime | None = None
    ip: IPAddress | None = None

    valid: bool = False
    expired: bool = False
    hard_expired: bool = False
    secure: bool = False
    security_passed: bool = False
    prolonged: bool = False

    session_key: str | None = None
    id_field: str | None = None
    error: SessionError | None = None

    @property
    def id(self) -> str | None:
        """Current public session id (only while identified)."""
        match self.identity:
            case Identified(id=sid):
                return sid
            case _:
                return None

    @property
    def err_id(self) -> str | None:
        """Last known public session id of a rejected session."""
        match self.identity:
            case Errored(err_id=sid):
                return sid
            case _:
                return None

    @property
    def any_id(self) -> str | None:
        """Whichever identifier is present."""
        return self.id or self.err_id

    @property
    def is_empty(self) -> bool:
        """Canonical empty record (no identifier, no error)."""
        return isinstance(self.identity, EmptyIdentity) and self.error is None

    @property
    def is_identified(self) -> bool:
        """Whether both parts of the subject identity are present."""
        return self.user_id is not None and self.user_email is not None

    @property
    def soft_expired(self) -> bool:
        """Expired, but still within the hard expiry threshold."""
        return self.expired and not self.hard_expired
