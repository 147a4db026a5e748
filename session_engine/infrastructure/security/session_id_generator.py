"""Session identifier generation.

Identifiers are 128-bit lowercase hex digests (32 characters):

    plain session:   <db-id>
    secure session:  <db-id>-<token>

Only ``db-id`` is used as the primary key in the sessions table; the token
half is verified against its salted hash (see SecureTokenHasher).
"""

import hashlib
import secrets
import time
from dataclasses import dataclass

from session_engine.infrastructure.security.secure_token import SecureTokenHasher

DIGEST_BYTES = 16


@dataclass(frozen=True, slots=True, kw_only=True)
class GeneratedSessionId:
    """Freshly generated identifier.

    Attributes:
        public_id: Identifier handed to the client.
        db_id: Primary key in the sessions table.
        db_token: Salted hash of the token (secure sessions only).
        secure: Whether public_id carries a security token.
    """

    public_id: str
    db_id: str
    db_token: str | None = None
    secure: bool = False


def split_secure_id(public_id: str) -> tuple[str, str | None]:
    """Split a public id into (db_id, token).

    Example:
        >>> split_secure_id("abc-def")
        ('abc', 'def')
        >>> split_secure_id("abc")
        ('abc', None)
    """
    db_id, sep, token = public_id.partition("-")
    return db_id, (token if sep else None)


class SessionIdGenerator:
    """Random session identifier generator.

    Usage:
        generator = SessionIdGenerator(SecureTokenHasher())
        generated = generator.generate(True, user_id, ip)
        # store generated.db_id + generated.db_token, return generated.public_id
    """

    def __init__(self, hasher: SecureTokenHasher) -> None:
        self._hasher = hasher

    @staticmethod
    def _digest(*seed: object) -> str:
        material = "".join(str(part) for part in seed if part is not None)
        h = hashlib.blake2b(digest_size=DIGEST_BYTES)
        h.update(material.encode("utf-8"))
        h.update(str(time.time_ns()).encode("ascii"))
        h.update(secrets.token_bytes(DIGEST_BYTES))
        return h.hexdigest()

    def generate(self, secure: bool, *seed: object) -> GeneratedSessionId:
        """Generate a new session identifier.

        Args:
            secure: Whether to append a security token.
            *seed: Extra material mixed into the digest (user id, address).

        Returns:
            GeneratedSessionId. Falls back to a plain identifier when the
            token cannot be hashed.
        """
        db_id = self._digest(*seed)
        if not secure:
            return GeneratedSessionId(public_id=db_id, db_id=db_id)

        token = secrets.token_hex(DIGEST_BYTES)
        db_token = self._hasher.encrypt(token)
        if not db_token:
            return GeneratedSessionId(public_id=db_id, db_id=db_id)
        return GeneratedSessionId(
            public_id=f"{db_id}-{token}",
            db_id=db_id,
            db_token=db_token,
            secure=True,
        )
