"""Request context helpers.

The engine never sees an HTTP framework. The surrounding middleware hands
it a plain mapping (the request context) and gets a SessionRecord back,
which it attaches to its own context with ``inject``.

Example context:
    {
        "remote_ip": "203.0.113.7",
        "params": {"session-id": "3f2a...-9c1e..."},
    }
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeAlias

from session_engine.domain.entities import SessionRecord
from session_engine.domain.value_objects.session_config import (
    DEFAULT_ID_PATH,
    DEFAULT_REMOTE_IP_PATH,
)

DEFAULT_SESSION_KEY = "session"

Extractor: TypeAlias = Callable[[Mapping[str, Any]], Any]


def compile_path(path: Sequence[str]) -> Extractor:
    """Return a function reading the value found at ``path`` in nested mappings.

    Example:
        >>> extract = compile_path(("params", "session-id"))
        >>> extract({"params": {"session-id": "abc"}})
        'abc'
        >>> extract({"params": None}) is None
        True
    """
    keys = tuple(path) or DEFAULT_ID_PATH

    def extract(context: Mapping[str, Any]) -> Any:
        value: Any = context
        for key in keys:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
            if value is None:
                return None
        return value

    return extract


def some_str(value: Any) -> str | None:
    """Stringify a value, mapping None and blank strings to None."""
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else None


def identify(
    request: Mapping[str, Any],
    path: Sequence[str] = DEFAULT_ID_PATH,
) -> str | None:
    """Read the candidate session id from a request context."""
    return some_str(compile_path(path)(request))


def remote_ip(
    request: Mapping[str, Any],
    path: Sequence[str] = DEFAULT_REMOTE_IP_PATH,
) -> Any:
    """Read the raw remote address from a request context."""
    return compile_path(path)(request)


def as_session_record(
    source: SessionRecord | Mapping[str, Any] | None,
    session_key: str = DEFAULT_SESSION_KEY,
) -> SessionRecord | None:
    """Get a session record out of a session-like source.

    Args:
        source: A SessionRecord, a request context holding one under
            ``session_key``, or None.
        session_key: Context key to look under.

    Returns:
        The record, or None when the source holds none.

    Raises:
        TypeError: If source is not one of the supported kinds.
    """
    match source:
        case None:
            return None
        case SessionRecord():
            return source
        case Mapping():
            found = source.get(session_key)
            return found if isinstance(found, SessionRecord) else None
        case _:
            raise TypeError(f"Not a session source: {type(source).__name__}")


def inject(
    context: Mapping[str, Any],
    record: SessionRecord,
    session_key: str | None = None,
) -> dict[str, Any]:
    """Return a copy of ``context`` with the record under its session key."""
    key = session_key or record.session_key or DEFAULT_SESSION_KEY
    return {**context, key: record}
