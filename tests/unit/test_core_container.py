"""Unit tests for the dependency container.

Tests cover:
- Logger adapter selection by environment
- Store adapter selection by SESSION_STORE_BACKEND
- Singleton behavior of app-scoped factories
- Service factories wiring caches from the configuration
"""

import os
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from session_engine.application.services import SessionLifecycle
from session_engine.core.config import get_settings
from session_engine.core.container import (
    create_session_lifecycle,
    create_session_variables,
    get_clock,
    get_database,
    get_logger,
    get_session_lifecycle,
    get_session_resolver,
    get_session_store,
    get_session_tables,
)
from session_engine.domain.value_objects import SessionConfig
from session_engine.infrastructure.cache import NoOpMemoCache, TTLMemoCache
from session_engine.infrastructure.persistence import (
    InMemorySessionStore,
    SessionStoreRepository,
)

CACHED_FACTORIES = (
    get_settings,
    get_logger,
    get_clock,
    get_database,
    get_session_tables,
    get_session_store,
    get_session_lifecycle,
    get_session_resolver,
)


@pytest.fixture(autouse=True)
def clear_container():
    for factory in CACHED_FACTORIES:
        factory.cache_clear()
    yield
    for factory in CACHED_FACTORIES:
        factory.cache_clear()


@pytest.mark.unit
class TestLoggerSelection:
    """Test get_logger adapter selection."""

    def test_development_uses_console_renderer(self):
        with patch.dict(os.environ, {"SESSION_ENVIRONMENT": "development"}, clear=True):
            with patch(
                "session_engine.infrastructure.logging.console_adapter.ConsoleAdapter"
            ) as adapter_cls:
                get_logger()

        adapter_cls.assert_called_once_with(use_json=False, level="INFO")

    def test_testing_uses_json(self):
        env = {"SESSION_ENVIRONMENT": "testing", "SESSION_LOG_LEVEL": "debug"}
        with patch.dict(os.environ, env, clear=True):
            with patch(
                "session_engine.infrastructure.logging.console_adapter.ConsoleAdapter"
            ) as adapter_cls:
                get_logger()

        adapter_cls.assert_called_once_with(use_json=True, level="DEBUG")


@pytest.mark.unit
class TestStoreSelection:
    """Test get_session_store adapter selection."""

    def test_memory_backend(self):
        with patch.dict(os.environ, {"SESSION_STORE_BACKEND": "memory"}, clear=True):
            store = get_session_store()

        assert isinstance(store, InMemorySessionStore)
        assert get_session_store() is store

    def test_database_backend(self, tmp_path):
        env = {
            "SESSION_STORE_BACKEND": "database",
            "SESSION_DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 's.db'}",
        }
        with patch.dict(os.environ, env, clear=True):
            store = get_session_store()

        assert isinstance(store, SessionStoreRepository)


@pytest.mark.unit
class TestServiceFactories:
    """Test create_* and get_* service factories."""

    def test_lifecycle_with_caching(self, store, hasher, clock):
        config = SessionConfig(cache_ttl=timedelta(minutes=2))

        lifecycle = create_session_lifecycle(
            config, store=store, hasher=hasher, clock=clock, logger=MagicMock()
        )

        assert isinstance(lifecycle, SessionLifecycle)
        assert isinstance(lifecycle.resolver.cache, TTLMemoCache)
        assert lifecycle.resolver.cache.ttl == timedelta(minutes=2)

    def test_lifecycle_without_caching(self, store, hasher, clock):
        config = SessionConfig(cache_ttl=None)

        lifecycle = create_session_lifecycle(
            config, store=store, hasher=hasher, clock=clock, logger=MagicMock()
        )

        assert isinstance(lifecycle.resolver.cache, NoOpMemoCache)

    def test_app_scoped_resolver_shared_with_lifecycle(self):
        with patch.dict(os.environ, {"SESSION_STORE_BACKEND": "memory"}, clear=True):
            lifecycle = get_session_lifecycle()
            resolver = get_session_resolver()

        assert lifecycle is get_session_lifecycle()
        assert resolver is lifecycle.resolver

    def test_variables_factory(self, store):
        variables = create_session_variables(
            SessionConfig(), store=store, logger=MagicMock()
        )
        assert variables is not None
