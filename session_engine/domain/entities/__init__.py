"""Domain entities."""

from session_engine.domain.entities.session import (
    EMPTY_IDENTITY,
    EmptyIdentity,
    Errored,
    Identified,
    IPAddress,
    SessionIdentity,
    SessionRecord,
)

__all__ = [
    "EMPTY_IDENTITY",
    "EmptyIdentity",
    "Errored",
    "IPAddress",
    "Identified",
    "SessionIdentity",
    "SessionRecord",
]
