"""Secure session token hashing.

A secure session id is ``<db-id>-<token>``. Only a salted scrypt hash of the
token is stored (``sessions.secure_token``); the plain token lives in the
client's copy of the session id.

Token Strategy:
    - scrypt KDF (cryptography), n=512, r=2, p=1, 32-byte output
    - 16-byte random salt per token
    - Stored form: ``b64url(salt) + "$" + b64url(hash)`` without padding
    - Verification is constant time (Scrypt.verify)
"""

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_N = 512
SCRYPT_R = 2
SCRYPT_P = 1
SALT_BYTES = 16
KEY_BYTES = 32
SEPARATOR = "$"


def _b64u_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64u_decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class SecureTokenHasher:
    """Salted one-way hashing of session security tokens.

    Usage:
        hasher = SecureTokenHasher()

        salted_hash = hasher.encrypt(token)   # store in sessions.secure_token
        hasher.verify(token, salted_hash)     # True
        hasher.verify("other", salted_hash)   # False
    """

    def __init__(
        self,
        *,
        n: int = SCRYPT_N,
        r: int = SCRYPT_R,
        p: int = SCRYPT_P,
        salt_bytes: int = SALT_BYTES,
        key_bytes: int = KEY_BYTES,
    ) -> None:
        self._n = n
        self._r = r
        self._p = p
        self._salt_bytes = salt_bytes
        self._key_bytes = key_bytes

    def _kdf(self, salt: bytes) -> Scrypt:
        return Scrypt(salt=salt, length=self._key_bytes, n=self._n, r=self._r, p=self._p)

    def encrypt(self, plain_token: str | None) -> str | None:
        """Hash a plain token with a fresh random salt.

        Args:
            plain_token: Token to hash.

        Returns:
            ``salt$hash`` (both unpadded urlsafe base64), or None when the
            token is None or cannot be encoded.
        """
        if plain_token is None:
            return None
        try:
            salt = secrets.token_bytes(self._salt_bytes)
            digest = self._kdf(salt).derive(plain_token.encode("utf-8"))
        except (UnicodeError, ValueError, TypeError):
            return None
        return f"{_b64u_encode(salt)}{SEPARATOR}{_b64u_encode(digest)}"

    def verify(self, plain_token: str | None, salted_hash: str | None) -> bool:
        """Check a plain token against a stored salted hash.

        Returns:
            True if the token matches, False otherwise (including any
            malformed input; never raises).
        """
        if not isinstance(plain_token, str) or not isinstance(salted_hash, str):
            return False
        salt_b64, sep, hash_b64 = salted_hash.partition(SEPARATOR)
        if not sep or not salt_b64 or not hash_b64:
            return False
        try:
            salt = _b64u_decode(salt_b64)
            expected = _b64u_decode(hash_b64)
            self._kdf(salt).verify(plain_token.encode("utf-8"), expected)
        except InvalidKey:
            return False
        except (binascii.Error, UnicodeError, ValueError, TypeError):
            return False
        return True
