"""Core shared kernel.

This module provides foundational utilities used across all architectural layers:
- Result types for railway-oriented programming
- Runtime environment enum
- Wall clock

Settings live in ``session_engine.core.config`` and dependency factories in
``session_engine.core.container``.
"""

from session_engine.core.result import Failure, Result, Success

__all__ = ["Failure", "Result", "Success"]
