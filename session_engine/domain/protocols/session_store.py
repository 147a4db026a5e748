"""Session store protocol (port) for persistence abstraction.

The relational backing store is reached only through these verbs.
Infrastructure implements the adapters (SQLAlchemy repository, in-memory
store). Store failures (connection lost, constraint violations) are raised
by the adapter and propagate; "not found" is never an exception.

Schema (minimum):
    sessions(id PK, user_id, user_email, secure_token NULL, ip, created, active)
    session_variables(session_id FK, name, value, PK(session_id, name))
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(slots=True, kw_only=True)
class SessionRow:
    """Data transfer object for one row of the sessions table.

    Decouples the SessionRecord entity from database rows.

    Attributes:
        id: Database session id (db-id).
        user_id: Owner user id.
        user_email: Owner e-mail address.
        secure_token: Salted hash of the security token, if any.
        ip: Bound address in string form.
        created: Creation time (UTC).
        active: Last activity time (UTC).
    """

    id: str
    user_id: int | None = None
    user_email: str | None = None
    secure_token: str | None = None
    ip: str | None = None
    created: datetime | None = None
    active: datetime | None = None


class SessionStore(Protocol):
    """Backing store port for sessions and session variables.

    Implementations:
        - SessionStoreRepository: SQLAlchemy (PostgreSQL, SQLite)
        - InMemorySessionStore: development and tests
    """

    async def fetch_by_id(self, db_id: str) -> SessionRow | None:
        """Get a session row by database id."""
        ...

    async def get_last_active(self, db_id: str) -> datetime | None:
        """Get only the last activity time of a session."""
        ...

    async def update_last_active(self, db_id: str, active: datetime) -> int:
        """Set the last activity time.

        Returns:
            Number of rows affected (0 when the row vanished).
        """
        ...

    async def upsert_session(self, row: SessionRow) -> int:
        """Insert or replace a session row.

        Returns:
            Number of rows affected.
        """
        ...

    async def delete_session_by_id(self, db_id: str) -> SessionRow | None:
        """Delete a session, returning the deleted row if it existed."""
        ...

    async def delete_sessions_by_user(self, user_id: int) -> list[SessionRow]:
        """Delete all sessions of a user, returning the deleted rows."""
        ...

    async def get_variable(self, db_id: str, name: str) -> str | None:
        """Get a serialized variable value."""
        ...

    async def get_variables(
        self, db_id: str, names: Sequence[str]
    ) -> dict[str, str]:
        """Get serialized values of the variables that exist."""
        ...

    async def put_variable(self, db_id: str, name: str, value: str) -> int:
        """Insert or replace a serialized variable value."""
        ...

    async def put_variables(self, db_id: str, values: Mapping[str, str]) -> int:
        """Insert or replace several serialized variable values."""
        ...

    async def delete_variable(self, db_id: str, name: str) -> int:
        """Delete a variable."""
        ...

    async def delete_variables(self, db_id: str, names: Iterable[str]) -> int:
        """Delete several variables."""
        ...

    async def delete_session_variables(self, db_id: str) -> int:
        """Delete all variables of one session."""
        ...

    async def delete_user_variables(self, user_id: int) -> int:
        """Delete all variables of every session owned by a user."""
        ...
