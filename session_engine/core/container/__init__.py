"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from session_engine.core.container import get_session_lifecycle, ...

The container is organized into modules:
- infrastructure: Core services (logging, clock, database, store, hashing)
- services: Session resolver, lifecycle and variables factories
"""

# Infrastructure services
from session_engine.core.container.infrastructure import (
    close_storage,
    get_clock,
    get_database,
    get_logger,
    get_session_store,
    get_session_tables,
    get_token_hasher,
    init_storage,
)

# Session services
from session_engine.core.container.services import (
    create_session_lifecycle,
    create_session_resolver,
    create_session_variables,
    get_session_lifecycle,
    get_session_resolver,
    get_session_variables,
)

__all__ = [
    "close_storage",
    "create_session_lifecycle",
    "create_session_resolver",
    "create_session_variables",
    "get_clock",
    "get_database",
    "get_logger",
    "get_session_lifecycle",
    "get_session_resolver",
    "get_session_store",
    "get_session_tables",
    "get_session_variables",
    "get_token_hasher",
    "init_storage",
]
