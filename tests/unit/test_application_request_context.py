"""Unit tests for request context helpers.

Tests cover:
- Path extraction from nested mappings
- Session id and remote address lookup
- Session source resolution (record, context, None, invalid)
- Injecting a record into a context
"""

import pytest

from session_engine.application.request_context import (
    as_session_record,
    compile_path,
    identify,
    inject,
    remote_ip,
    some_str,
)
from session_engine.domain.entities import SessionRecord


@pytest.mark.unit
class TestCompilePath:
    """Test nested mapping extraction."""

    def test_reads_nested_value(self):
        extract = compile_path(("params", "session-id"))
        assert extract({"params": {"session-id": "abc"}}) == "abc"

    def test_missing_key(self):
        extract = compile_path(("params", "session-id"))
        assert extract({"params": {}}) is None

    def test_non_mapping_in_path(self):
        extract = compile_path(("params", "session-id"))
        assert extract({"params": "flat"}) is None


@pytest.mark.unit
class TestIdentify:
    """Test session id and address lookup."""

    def test_identify_default_path(self):
        assert identify({"params": {"session-id": "abc"}}) == "abc"

    def test_identify_custom_path(self):
        assert identify({"cookies": {"sid": "abc"}}, ("cookies", "sid")) == "abc"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_id_is_none(self, value):
        assert identify({"params": {"session-id": value}}) is None

    def test_remote_ip(self):
        assert remote_ip({"remote_ip": "192.0.2.10"}) == "192.0.2.10"

    def test_some_str(self):
        assert some_str(b"abc") == "abc"
        assert some_str(42) == "42"
        assert some_str(None) is None


@pytest.mark.unit
class TestSessionSources:
    """Test as_session_record and inject."""

    def test_record_passes_through(self):
        record = SessionRecord(user_id=1)
        assert as_session_record(record) is record

    def test_none(self):
        assert as_session_record(None) is None

    def test_context_lookup(self):
        record = SessionRecord(user_id=1)
        assert as_session_record({"session": record}) is record

    def test_context_without_record(self):
        assert as_session_record({"session": "not a record"}) is None

    def test_invalid_source_raises(self):
        with pytest.raises(TypeError, match="Not a session source"):
            as_session_record(42)  # type: ignore[arg-type]

    def test_inject_uses_record_session_key(self):
        record = SessionRecord(session_key="sess")
        context = {"remote_ip": "192.0.2.10"}

        injected = inject(context, record)

        assert injected["sess"] is record
        assert "sess" not in context

    def test_inject_default_key(self):
        record = SessionRecord()
        assert inject({}, record)["session"] is record
