"""Application services."""

from session_engine.application.services.session_lifecycle import SessionLifecycle
from session_engine.application.services.session_resolver import (
    CacheKey,
    SessionResolver,
    ip_key,
)
from session_engine.application.services.session_variables import SessionVariables

__all__ = [
    "CacheKey",
    "SessionLifecycle",
    "SessionResolver",
    "SessionVariables",
    "ip_key",
]
