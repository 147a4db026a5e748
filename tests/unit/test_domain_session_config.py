"""Unit tests for SessionConfig and the cache margin calculation.

Tests cover:
- Cache margin for every ratio between expires and cache_ttl
- Derived fields (id_field, cache_margin)
- Validation of invalid configurations
- Soft and hard expiry checks
"""

from datetime import UTC, datetime, timedelta

import pytest

from session_engine.domain.value_objects import SessionConfig, calculate_cache_margin

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.mark.unit
class TestCalculateCacheMargin:
    """Test the refresh margin derived from expires and cache_ttl."""

    def test_expires_much_longer_than_ttl(self):
        """Test margin is expires - ttl when expires > 2 * ttl."""
        margin = calculate_cache_margin(timedelta(minutes=10), timedelta(minutes=2))
        assert margin == timedelta(minutes=8)

    def test_expires_slightly_longer_than_ttl(self):
        """Test margin is ttl when ttl < expires <= 2 * ttl."""
        margin = calculate_cache_margin(timedelta(minutes=3), timedelta(minutes=2))
        assert margin == timedelta(minutes=2)

    def test_ttl_much_longer_than_expires(self):
        """Test margin is expires when ttl > 2 * expires."""
        margin = calculate_cache_margin(timedelta(minutes=1), timedelta(minutes=10))
        assert margin == timedelta(minutes=1)

    def test_ttl_slightly_longer_than_expires(self):
        """Test margin is ttl - expires otherwise."""
        margin = calculate_cache_margin(timedelta(minutes=2), timedelta(minutes=3))
        assert margin == timedelta(minutes=1)

    def test_equal_durations(self):
        """Test equal durations fall through to ttl - expires (zero)."""
        margin = calculate_cache_margin(timedelta(minutes=2), timedelta(minutes=2))
        assert margin == timedelta(0)

    @pytest.mark.parametrize(
        "expires,cache_ttl",
        [
            (None, timedelta(minutes=2)),
            (timedelta(minutes=10), None),
            (timedelta(0), timedelta(minutes=2)),
            (timedelta(minutes=10), timedelta(0)),
        ],
    )
    def test_missing_duration_disables_margin(self, expires, cache_ttl):
        """Test no margin when either duration is unset or zero."""
        assert calculate_cache_margin(expires, cache_ttl) is None


@pytest.mark.unit
class TestSessionConfigDefaults:
    """Test default and derived configuration values."""

    def test_defaults(self):
        """Test default values."""
        config = SessionConfig()

        assert config.sessions_table == "sessions"
        assert config.variables_table == "session_variables"
        assert config.session_key == "session"
        assert config.id_path == ("params", "session-id")
        assert config.expires == timedelta(minutes=15)
        assert config.cache_ttl == timedelta(minutes=2)
        assert config.secured is False
        assert config.single_session is False
        assert config.bad_ip_expires is False

    def test_id_field_defaults_to_last_path_element(self):
        """Test id_field is derived from id_path."""
        config = SessionConfig(id_path=["query", "sid"])

        assert config.id_path == ("query", "sid")
        assert config.id_field == "sid"

    def test_explicit_id_field_kept(self):
        """Test an explicit id_field is not overwritten."""
        config = SessionConfig(id_path=("query", "sid"), id_field="session")
        assert config.id_field == "session"

    def test_cache_margin_derived(self):
        """Test cache_margin is computed at construction."""
        config = SessionConfig(
            expires=timedelta(minutes=10), cache_ttl=timedelta(minutes=2)
        )
        assert config.cache_margin == timedelta(minutes=8)

    def test_caching_disabled_without_ttl(self):
        """Test caching_enabled follows cache_ttl."""
        assert SessionConfig(cache_ttl=None).caching_enabled is False
        assert SessionConfig(cache_ttl=timedelta(0)).caching_enabled is False
        assert SessionConfig().caching_enabled is True

    def test_config_is_immutable(self):
        """Test configuration cannot be changed after construction."""
        config = SessionConfig()
        with pytest.raises(AttributeError):
            config.secured = True  # type: ignore[misc]


@pytest.mark.unit
class TestSessionConfigValidation:
    """Test invalid configurations are rejected."""

    def test_empty_table_name_rejected(self):
        with pytest.raises(ValueError, match="table names"):
            SessionConfig(sessions_table="")

    def test_empty_id_path_rejected(self):
        with pytest.raises(ValueError, match="id_path"):
            SessionConfig(id_path=())

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError, match="expires must not be negative"):
            SessionConfig(expires=timedelta(seconds=-1))

    def test_zero_cache_size_rejected(self):
        with pytest.raises(ValueError, match="cache_size"):
            SessionConfig(cache_size=0)


@pytest.mark.unit
class TestSessionConfigExpiry:
    """Test soft and hard expiry checks."""

    def test_not_expired_within_timeout(self):
        config = SessionConfig(expires=timedelta(minutes=10))
        assert config.is_expired(NOW - timedelta(minutes=10), NOW) is False

    def test_expired_after_timeout(self):
        config = SessionConfig(expires=timedelta(minutes=10))
        assert config.is_expired(NOW - timedelta(minutes=10, seconds=1), NOW) is True

    def test_never_expires_without_timeout(self):
        config = SessionConfig(expires=None)
        assert config.is_expired(NOW - timedelta(days=365), NOW) is False

    def test_missing_active_is_not_expired(self):
        assert SessionConfig().is_expired(None, NOW) is False

    def test_hard_expiry(self):
        config = SessionConfig(hard_expires=timedelta(minutes=30))

        assert config.is_hard_expired(NOW - timedelta(minutes=29), NOW) is False
        assert config.is_hard_expired(NOW - timedelta(minutes=31), NOW) is True
