"""Result types for railway-oriented programming.

Operations that can fail in an expected way return a Result instead of
raising. Session validation failures do not use this type (they travel on
the SessionRecord itself); Result is used where a caller needs a value OR a
reason, e.g. reading a session variable.

Usage:
    result = await variables.get(record, "return-to")
    match result:
        case Success(value=value):
            redirect(value)
        case Failure(error=reason):
            logger.warning("Cannot read variable", reason=reason)
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


# Type alias for Result union
Result: TypeAlias = Success[T] | Failure[E]
