"""Pytest configuration for the session engine test suite.

This configuration provides:
1. A manually driven clock so expiry and cache TTLs are deterministic
2. In-memory store and real scrypt hasher fixtures
3. A lifecycle factory wiring real TTL caches to the manual clock
4. SQLite (aiosqlite) database fixtures for integration tests
5. Automatic asyncio marking of coroutine tests
"""

import inspect
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from session_engine.core.container import create_session_lifecycle
from session_engine.domain.value_objects import SessionConfig
from session_engine.infrastructure.persistence import (
    Database,
    InMemorySessionStore,
    build_session_tables,
)
from session_engine.infrastructure.security import SecureTokenHasher

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

IP = "192.0.2.10"
OTHER_IP = "198.51.100.20"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now += timedelta(**kwargs)
        return self._now


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    """expires=10m, cache_ttl=2m -> cache margin 8m."""
    return SessionConfig(
        expires=timedelta(minutes=10),
        hard_expires=timedelta(minutes=30),
        cache_ttl=timedelta(minutes=2),
    )


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture(scope="session")
def hasher():
    return SecureTokenHasher()


@pytest.fixture
def logger():
    """Mock logger; ``bind`` returns the same mock so calls stay inspectable."""
    mock_logger = MagicMock()
    mock_logger.bind.return_value = mock_logger
    return mock_logger


@pytest.fixture
def make_lifecycle(store, hasher, clock, logger):
    """Build a SessionLifecycle with real TTL caches on the manual clock.

    Usage:
        lifecycle = make_lifecycle(secured=True)
    """

    def factory(config: SessionConfig | None = None, **overrides):
        if config is None:
            options = {
                "expires": timedelta(minutes=10),
                "hard_expires": timedelta(minutes=30),
                "cache_ttl": timedelta(minutes=2),
            } | overrides
            config = SessionConfig(**options)
        return create_session_lifecycle(
            config, store=store, hasher=hasher, clock=clock, logger=logger
        )

    return factory


@pytest.fixture
def lifecycle(make_lifecycle):
    return make_lifecycle()


def request_for(sid: str | None, ip: str | None = IP) -> dict:
    """Build a request context carrying a session id and remote address."""
    return {"params": {"session-id": sid}, "remote_ip": ip}


@pytest_asyncio.fixture
async def sqlite_database(tmp_path):
    """File-backed SQLite database with the session tables created."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'sessions.db'}")
    tables = build_session_tables()
    await database.create_all(tables.metadata)
    yield database, tables
    await database.close()


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with real database"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        function = getattr(item, "function", None)
        if function is not None and inspect.iscoroutinefunction(function):
            item.add_marker(pytest.mark.asyncio)
