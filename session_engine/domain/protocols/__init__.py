"""Domain protocols (ports).

Infrastructure adapters satisfy these through structural typing.
"""

from session_engine.domain.protocols.clock_protocol import Clock
from session_engine.domain.protocols.logger_protocol import LoggerProtocol
from session_engine.domain.protocols.memo_cache import MemoCache
from session_engine.domain.protocols.session_store import SessionRow, SessionStore

__all__ = [
    "Clock",
    "LoggerProtocol",
    "MemoCache",
    "SessionRow",
    "SessionStore",
]
