"""Core enums package.

Usage:
    from session_engine.core.enums import Environment
"""

from session_engine.core.enums.environment import Environment

__all__ = ["Environment"]
