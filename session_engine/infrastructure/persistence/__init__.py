"""Persistence infrastructure: database engine, tables, store adapters."""

from session_engine.infrastructure.persistence.database import Database
from session_engine.infrastructure.persistence.memory_session_store import (
    InMemorySessionStore,
)
from session_engine.infrastructure.persistence.repositories import (
    SessionStoreRepository,
)
from session_engine.infrastructure.persistence.tables import (
    SessionTables,
    build_session_tables,
)

__all__ = [
    "Database",
    "InMemorySessionStore",
    "SessionStoreRepository",
    "SessionTables",
    "build_session_tables",
]
