"""In-memory session store implementation.

Concrete implementation of the SessionStore protocol using Python dicts.
No external dependencies - useful for testing and development.

Note:
    Not suitable for production with multiple processes/servers.
    Data is lost on restart. Use SessionStoreRepository for production.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime

from session_engine.domain.protocols.session_store import SessionRow


class InMemorySessionStore:
    """Dict-backed session store.

    Note: Does NOT inherit from SessionStore protocol (uses structural typing).

    Usage:
        store = InMemorySessionStore()
        await store.upsert_session(row)
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRow] = {}
        self._variables: dict[str, dict[str, str]] = {}

    async def fetch_by_id(self, db_id: str) -> SessionRow | None:
        row = self._sessions.get(db_id)
        return None if row is None else replace(row)

    async def get_last_active(self, db_id: str) -> datetime | None:
        row = self._sessions.get(db_id)
        return None if row is None else row.active

    async def update_last_active(self, db_id: str, active: datetime) -> int:
        row = self._sessions.get(db_id)
        if row is None:
            return 0
        row.active = active
        return 1

    async def upsert_session(self, row: SessionRow) -> int:
        self._sessions[row.id] = replace(row)
        return 1

    async def delete_session_by_id(self, db_id: str) -> SessionRow | None:
        self._variables.pop(db_id, None)
        return self._sessions.pop(db_id, None)

    async def delete_sessions_by_user(self, user_id: int) -> list[SessionRow]:
        owned = [sid for sid, row in self._sessions.items() if row.user_id == user_id]
        deleted = []
        for sid in owned:
            self._variables.pop(sid, None)
            deleted.append(self._sessions.pop(sid))
        return deleted

    async def get_variable(self, db_id: str, name: str) -> str | None:
        return self._variables.get(db_id, {}).get(name)

    async def get_variables(self, db_id: str, names: Sequence[str]) -> dict[str, str]:
        stored = self._variables.get(db_id, {})
        return {name: stored[name] for name in names if name in stored}

    async def put_variable(self, db_id: str, name: str, value: str) -> int:
        self._variables.setdefault(db_id, {})[name] = value
        return 1

    async def put_variables(self, db_id: str, values: Mapping[str, str]) -> int:
        self._variables.setdefault(db_id, {}).update(values)
        return len(values)

    async def delete_variable(self, db_id: str, name: str) -> int:
        return 1 if self._variables.get(db_id, {}).pop(name, None) is not None else 0

    async def delete_variables(self, db_id: str, names: Iterable[str]) -> int:
        stored = self._variables.get(db_id, {})
        return sum(1 for name in list(names) if stored.pop(name, None) is not None)

    async def delete_session_variables(self, db_id: str) -> int:
        return len(self._variables.pop(db_id, {}))

    async def delete_user_variables(self, user_id: int) -> int:
        owned = [sid for sid, row in self._sessions.items() if row.user_id == user_id]
        return sum(len(self._variables.pop(sid, {})) for sid in owned)

    def clear_all(self) -> None:
        """Clear all sessions and variables. Useful for testing."""
        self._sessions.clear()
        self._variables.clear()

    def session_count(self) -> int:
        """Number of stored sessions."""
        return len(self._sessions)
