"""Clock protocol.

Every time-dependent decision in the engine (expiry, cache TTL, refresh
margin) reads the current time through this port, so tests can drive time
explicitly instead of sleeping.
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...
