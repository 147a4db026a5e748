"""Unit tests for secure token hashing and session id generation.

Tests cover:
- SecureTokenHasher encrypt/verify (salted, one-way, constant format)
- verify never raises on malformed input
- SessionIdGenerator plain and secure identifiers
- split_secure_id
- Session id format validation
"""

from unittest.mock import MagicMock

import pytest

from session_engine.domain.validators import sid_valid
from session_engine.infrastructure.security import (
    SecureTokenHasher,
    SessionIdGenerator,
    split_secure_id,
)


@pytest.mark.unit
class TestSecureTokenHasher:
    """Test scrypt token hashing."""

    def test_encrypt_and_verify(self, hasher):
        salted = hasher.encrypt("token-123")

        assert salted is not None
        assert hasher.verify("token-123", salted) is True

    def test_wrong_token_rejected(self, hasher):
        salted = hasher.encrypt("token-123")
        assert hasher.verify("token-124", salted) is False

    def test_salt_differs_per_call(self, hasher):
        first = hasher.encrypt("token-123")
        second = hasher.encrypt("token-123")

        assert first != second
        assert hasher.verify("token-123", first)
        assert hasher.verify("token-123", second)

    def test_stored_form_has_no_plain_token(self, hasher):
        salted = hasher.encrypt("token-123")

        assert "token-123" not in salted
        assert salted.count("$") == 1
        assert "=" not in salted

    def test_encrypt_none(self, hasher):
        assert hasher.encrypt(None) is None

    @pytest.mark.parametrize(
        "salted_hash",
        [None, "", "no-separator", "$", "abc$", "$abc", "!!!$@@@", 123],
    )
    def test_verify_malformed_hash_returns_false(self, hasher, salted_hash):
        assert hasher.verify("token-123", salted_hash) is False

    def test_verify_none_token(self, hasher):
        salted = hasher.encrypt("token-123")
        assert hasher.verify(None, salted) is False


@pytest.mark.unit
class TestSessionIdGenerator:
    """Test session identifier generation."""

    def test_plain_id(self, hasher):
        generated = SessionIdGenerator(hasher).generate(False, 42, "192.0.2.10")

        assert generated.secure is False
        assert generated.db_token is None
        assert generated.public_id == generated.db_id
        assert len(generated.db_id) == 32
        assert sid_valid(generated.public_id)

    def test_secure_id(self, hasher):
        generated = SessionIdGenerator(hasher).generate(True, 42)

        db_id, token = split_secure_id(generated.public_id)

        assert generated.secure is True
        assert db_id == generated.db_id
        assert len(token) == 32
        assert sid_valid(generated.public_id)
        assert hasher.verify(token, generated.db_token)

    def test_ids_are_unique(self, hasher):
        generator = SessionIdGenerator(hasher)
        ids = {generator.generate(False, 42).db_id for _ in range(50)}
        assert len(ids) == 50

    def test_secure_falls_back_when_hashing_fails(self):
        failing = MagicMock(spec=SecureTokenHasher)
        failing.encrypt.return_value = None

        generated = SessionIdGenerator(failing).generate(True, 42)

        assert generated.secure is False
        assert generated.public_id == generated.db_id


@pytest.mark.unit
class TestSessionIdFormat:
    """Test split_secure_id and sid_valid."""

    def test_split_plain(self):
        assert split_secure_id("abc") == ("abc", None)

    def test_split_secure(self):
        assert split_secure_id("abc-def") == ("abc", "def")

    @pytest.mark.parametrize(
        "sid",
        ["a" * 30, "0" * 128, f"{'a' * 32}-{'b' * 32}"],
    )
    def test_valid_ids(self, sid):
        assert sid_valid(sid) is True

    @pytest.mark.parametrize(
        "sid",
        [
            None,
            "",
            "a" * 29,
            "a" * 129,
            "A" * 32,
            "g" * 32,
            f"{'a' * 32}-",
            f"{'a' * 32}-{'b' * 32}-{'c' * 32}",
            "../../etc/passwd",
            12345,
        ],
    )
    def test_invalid_ids(self, sid):
        assert sid_valid(sid) is False
