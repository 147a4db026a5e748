"""SessionStoreRepository - SQLAlchemy implementation of the SessionStore protocol.

Adapter for hexagonal architecture. Maps between SessionRow DTOs and rows
of the configured sessions / session variables tables.

Each verb runs in its own transaction (``Database.get_session``). Database
errors propagate as SQLAlchemy exceptions; "not found" is None / 0.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from session_engine.domain.protocols.session_store import SessionRow
from session_engine.infrastructure.persistence.database import Database
from session_engine.infrastructure.persistence.tables import SessionTables


def _utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC)


class SessionStoreRepository:
    """SQLAlchemy implementation of SessionStore protocol.

    This class does NOT inherit from SessionStore protocol
    (Protocol uses structural typing).

    Example:
        >>> tables = build_session_tables("sessions", "session_variables")
        >>> store = SessionStoreRepository(database, tables)
        >>> row = await store.fetch_by_id(db_id)
    """

    def __init__(self, database: Database, tables: SessionTables) -> None:
        """Initialize repository.

        Args:
            database: Database providing transactional sessions.
            tables: Sessions and variables tables.
        """
        self._database = database
        self._sessions = tables.sessions
        self._variables = tables.variables

    # Sessions

    async def fetch_by_id(self, db_id: str) -> SessionRow | None:
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._sessions).where(self._sessions.c.id == db_id)
            )
            row = result.mappings().first()
        return None if row is None else self._to_row(row)

    async def get_last_active(self, db_id: str) -> datetime | None:
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._sessions.c.active).where(self._sessions.c.id == db_id)
            )
            return _utc(result.scalar_one_or_none())

    async def update_last_active(self, db_id: str, active: datetime) -> int:
        async with self._database.get_session() as session:
            result = await session.execute(
                update(self._sessions)
                .where(self._sessions.c.id == db_id)
                .values(active=_to_utc(active))
            )
            return result.rowcount or 0

    async def upsert_session(self, row: SessionRow) -> int:
        """Insert the session row, replacing an existing row with the same id."""
        values = self._to_values(row)
        async with self._database.get_session() as session:
            result = await session.execute(
                update(self._sessions)
                .where(self._sessions.c.id == row.id)
                .values(**values)
            )
            if result.rowcount:
                return result.rowcount
            await session.execute(insert(self._sessions).values(id=row.id, **values))
            return 1

    async def delete_session_by_id(self, db_id: str) -> SessionRow | None:
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._sessions).where(self._sessions.c.id == db_id)
            )
            row = result.mappings().first()
            if row is None:
                return None
            await session.execute(
                delete(self._sessions).where(self._sessions.c.id == db_id)
            )
        return self._to_row(row)

    async def delete_sessions_by_user(self, user_id: int) -> list[SessionRow]:
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._sessions).where(self._sessions.c.user_id == user_id)
            )
            rows = [self._to_row(row) for row in result.mappings().all()]
            if rows:
                await session.execute(
                    delete(self._sessions).where(self._sessions.c.user_id == user_id)
                )
        return rows

    # Variables

    async def get_variable(self, db_id: str, name: str) -> str | None:
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._variables.c.value).where(
                    self._variables.c.session_id == db_id,
                    self._variables.c.name == name,
                )
            )
            return result.scalar_one_or_none()

    async def get_variables(self, db_id: str, names: Sequence[str]) -> dict[str, str]:
        if not names:
            return {}
        async with self._database.get_session() as session:
            result = await session.execute(
                select(self._variables.c.name, self._variables.c.value).where(
                    self._variables.c.session_id == db_id,
                    self._variables.c.name.in_(list(names)),
                )
            )
            return {name: value for name, value in result.all()}

    async def put_variable(self, db_id: str, name: str, value: str) -> int:
        async with self._database.get_session() as session:
            return await self._put(session, db_id, name, value)

    async def put_variables(self, db_id: str, values: Mapping[str, str]) -> int:
        count = 0
        async with self._database.get_session() as session:
            for name, value in values.items():
                count += await self._put(session, db_id, name, value)
        return count

    async def delete_variable(self, db_id: str, name: str) -> int:
        async with self._database.get_session() as session:
            result = await session.execute(
                delete(self._variables).where(
                    self._variables.c.session_id == db_id,
                    self._variables.c.name == name,
                )
            )
            return result.rowcount or 0

    async def delete_variables(self, db_id: str, names: Iterable[str]) -> int:
        names = list(names)
        if not names:
            return 0
        async with self._database.get_session() as session:
            result = await session.execute(
                delete(self._variables).where(
                    self._variables.c.session_id == db_id,
                    self._variables.c.name.in_(names),
                )
            )
            return result.rowcount or 0

    async def delete_session_variables(self, db_id: str) -> int:
        async with self._database.get_session() as session:
            result = await session.execute(
                delete(self._variables).where(self._variables.c.session_id == db_id)
            )
            return result.rowcount or 0

    async def delete_user_variables(self, user_id: int) -> int:
        """Delete the variables of every session owned by ``user_id``."""
        owned = select(self._sessions.c.id).where(self._sessions.c.user_id == user_id)
        async with self._database.get_session() as session:
            result = await session.execute(
                delete(self._variables).where(self._variables.c.session_id.in_(owned))
            )
            return result.rowcount or 0

    # Mapping helpers

    async def _put(self, session: AsyncSession, db_id: str, name: str, value: str) -> int:
        result = await session.execute(
            update(self._variables)
            .where(
                self._variables.c.session_id == db_id,
                self._variables.c.name == name,
            )
            .values(value=value)
        )
        if result.rowcount:
            return result.rowcount
        await session.execute(
            insert(self._variables).values(session_id=db_id, name=name, value=value)
        )
        return 1

    @staticmethod
    def _to_values(row: SessionRow) -> dict[str, Any]:
        return {
            "user_id": row.user_id,
            "user_email": row.user_email,
            "secure_token": row.secure_token,
            "ip": row.ip,
            "created": _to_utc(row.created),
            "active": _to_utc(row.active),
        }

    @staticmethod
    def _to_row(row: Mapping[str, Any]) -> SessionRow:
        return SessionRow(
            id=row["id"],
            user_id=row["user_id"],
            user_email=row["user_email"],
            secure_token=row["secure_token"],
            ip=row["ip"],
            created=_utc(row["created"]),
            active=_utc(row["active"]),
        )
