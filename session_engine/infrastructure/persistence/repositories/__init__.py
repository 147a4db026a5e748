"""Repository implementations (adapters)."""

from session_engine.infrastructure.persistence.repositories.session_store_repository import (
    SessionStoreRepository,
)

__all__ = ["SessionStoreRepository"]
