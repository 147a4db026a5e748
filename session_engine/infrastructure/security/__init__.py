"""Security infrastructure: token hashing and identifier generation."""

from session_engine.infrastructure.security.secure_token import SecureTokenHasher
from session_engine.infrastructure.security.session_id_generator import (
    GeneratedSessionId,
    SessionIdGenerator,
    split_secure_id,
)

__all__ = [
    "GeneratedSessionId",
    "SecureTokenHasher",
    "SessionIdGenerator",
    "split_secure_id",
]
