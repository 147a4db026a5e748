"""Session service factories.

``create_*`` functions build fresh services from explicit dependencies
(anything omitted comes from the application-scoped container). The
``get_*`` functions return the application-scoped singletons built from
settings.

The resolver and lifecycle of one engine must share the same store and
caches, so ``create_session_lifecycle`` builds its own resolver when none
is given.
"""

from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from session_engine.core.config import get_settings
from session_engine.core.container.infrastructure import (
    get_clock,
    get_logger,
    get_session_store,
    get_token_hasher,
)

if TYPE_CHECKING:
    from session_engine.application.services import (
        CacheKey,
        SessionLifecycle,
        SessionResolver,
        SessionVariables,
    )
    from session_engine.domain.entities import SessionRecord
    from session_engine.domain.protocols.clock_protocol import Clock
    from session_engine.domain.protocols.logger_protocol import LoggerProtocol
    from session_engine.domain.protocols.memo_cache import MemoCache
    from session_engine.domain.protocols.session_store import SessionStore
    from session_engine.domain.value_objects import SessionConfig
    from session_engine.infrastructure.security.secure_token import (
        SecureTokenHasher,
    )


def _memo_cache(ttl: timedelta | None, maxsize: int, clock: "Clock") -> "MemoCache":
    from session_engine.infrastructure.cache import NoOpMemoCache, TTLMemoCache

    if ttl is None or ttl <= timedelta(0):
        return NoOpMemoCache()
    return TTLMemoCache(ttl=ttl, maxsize=maxsize, clock=clock)


def create_session_resolver(
    config: "SessionConfig | None" = None,
    *,
    store: "SessionStore | None" = None,
    hasher: "SecureTokenHasher | None" = None,
    clock: "Clock | None" = None,
    logger: "LoggerProtocol | None" = None,
) -> "SessionResolver":
    """Build a resolver with caches sized from the configuration.

    Caching is disabled (no-op caches) when cache_ttl is not set.
    """
    from session_engine.application.services import SessionResolver

    config = config if config is not None else get_settings().to_session_config()
    clock = clock if clock is not None else get_clock()

    cache: "MemoCache[CacheKey, SessionRecord]" = _memo_cache(
        config.cache_ttl if config.caching_enabled else None,
        config.cache_size,
        clock,
    )
    token_cache = _memo_cache(config.token_cache_ttl, config.token_cache_size, clock)

    return SessionResolver(
        config=config,
        store=store if store is not None else get_session_store(),
        hasher=hasher if hasher is not None else get_token_hasher(),
        clock=clock,
        logger=logger if logger is not None else get_logger(),
        cache=cache,
        token_cache=token_cache,
    )


def create_session_lifecycle(
    config: "SessionConfig | None" = None,
    *,
    store: "SessionStore | None" = None,
    resolver: "SessionResolver | None" = None,
    hasher: "SecureTokenHasher | None" = None,
    clock: "Clock | None" = None,
    logger: "LoggerProtocol | None" = None,
) -> "SessionLifecycle":
    """Build a lifecycle service (create/process/prolong/delete).

    Usage:
        lifecycle = create_session_lifecycle(
            SessionConfig(expires=timedelta(minutes=5)),
            store=InMemorySessionStore(),
        )
    """
    from session_engine.application.services import SessionLifecycle
    from session_engine.infrastructure.security import SessionIdGenerator

    config = config if config is not None else get_settings().to_session_config()
    store = store if store is not None else get_session_store()
    hasher = hasher if hasher is not None else get_token_hasher()
    clock = clock if clock is not None else get_clock()
    logger = logger if logger is not None else get_logger()

    if resolver is None:
        resolver = create_session_resolver(
            config, store=store, hasher=hasher, clock=clock, logger=logger
        )

    return SessionLifecycle(
        config=config,
        store=store,
        resolver=resolver,
        generator=SessionIdGenerator(hasher),
        clock=clock,
        logger=logger,
    )


def create_session_variables(
    config: "SessionConfig | None" = None,
    *,
    store: "SessionStore | None" = None,
    logger: "LoggerProtocol | None" = None,
) -> "SessionVariables":
    """Build a session variables service."""
    from session_engine.application.services import SessionVariables

    return SessionVariables(
        config=config if config is not None else get_settings().to_session_config(),
        store=store if store is not None else get_session_store(),
        logger=logger if logger is not None else get_logger(),
    )


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_session_lifecycle() -> "SessionLifecycle":
    """Get the application-scoped session lifecycle service."""
    return create_session_lifecycle()


@lru_cache()
def get_session_resolver() -> "SessionResolver":
    """Get the resolver shared with the application-scoped lifecycle."""
    return get_session_lifecycle().resolver


@lru_cache()
def get_session_variables() -> "SessionVariables":
    """Get the application-scoped session variables service."""
    return create_session_variables()
