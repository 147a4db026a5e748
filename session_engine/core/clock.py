"""Wall clock implementation of the Clock protocol."""

from datetime import UTC, datetime


class SystemClock:
    """Clock backed by the system wall clock (UTC).

    Note: Does NOT inherit from Clock protocol (uses structural typing).
    """

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(UTC)
