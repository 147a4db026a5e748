"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (console, JSON outside development)
- Clock (system wall clock)
- Database (SQLAlchemy async engine)
- Session tables (configurable names)
- Session store (database repository or in-memory)
- Secure token hashing (scrypt)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from session_engine.core.config import get_settings
from session_engine.infrastructure.persistence.database import Database

if TYPE_CHECKING:
    from session_engine.domain.protocols.clock_protocol import Clock
    from session_engine.domain.protocols.logger_protocol import LoggerProtocol
    from session_engine.domain.protocols.session_store import SessionStore
    from session_engine.infrastructure.persistence.tables import SessionTables
    from session_engine.infrastructure.security.secure_token import (
        SecureTokenHasher,
    )


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from session_engine.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        use_json=settings.environment.wants_json_logs,
        level=settings.log_level,
    )


@lru_cache()
def get_clock() -> "Clock":
    """Get the wall clock singleton."""
    from session_engine.core.clock import SystemClock

    return SystemClock()


@lru_cache()
def get_database() -> Database:
    """Get database manager singleton (app-scoped).

    Returns Database instance with connection pool.

    Returns:
        Database manager instance.
    """
    settings = get_settings()
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_session_tables() -> "SessionTables":
    """Get the sessions/variables tables for the configured table names."""
    from session_engine.infrastructure.persistence.tables import build_session_tables

    settings = get_settings()
    return build_session_tables(settings.sessions_table, settings.variables_table)


@lru_cache()
def get_session_store() -> "SessionStore":
    """Get session store singleton (app-scoped).

    Container owns factory logic - decides which adapter based on
    SESSION_STORE_BACKEND:
        - 'database': SessionStoreRepository (SQLAlchemy)
        - 'memory': InMemorySessionStore (single process, tests)

    Returns:
        Store implementing SessionStore.
    """
    backend = get_settings().store_backend

    if backend == "memory":
        from session_engine.infrastructure.persistence.memory_session_store import (
            InMemorySessionStore,
        )

        return InMemorySessionStore()

    from session_engine.infrastructure.persistence.repositories import (
        SessionStoreRepository,
    )

    return SessionStoreRepository(get_database(), get_session_tables())


@lru_cache()
def get_token_hasher() -> "SecureTokenHasher":
    """Get the scrypt secure token hasher singleton."""
    from session_engine.infrastructure.security.secure_token import SecureTokenHasher

    return SecureTokenHasher()


# ============================================================================
# Lifecycle helpers
# ============================================================================


async def init_storage() -> None:
    """Create the session tables when the database backend is configured.

    Warning: development/testing only. Production uses migrations.
    """
    if get_settings().store_backend == "database":
        await get_database().create_all(get_session_tables().metadata)


async def close_storage() -> None:
    """Dispose of the database engine if it was created."""
    if get_database.cache_info().currsize:
        await get_database().close()
