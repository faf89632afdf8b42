"""
Structured error types for timespine.

Provides a small, typed hierarchy of errors raised by series construction,
the collection protocol, the windowing/join/resample engines and the text
codecs. Every error carries a category and a structured context so callers
can log it, route it, or turn it into a report without parsing messages.

Manifesto:
    - **Typed over generic:** a length mismatch, an out-of-order key and a
      duplicate key are different failures and get different classes
    - **Rich context:** the offending position and keys travel with the error
    - **Fail at the boundary:** construction errors are raised to the immediate
      caller and are never downgraded to an empty series
    - **No retries:** nothing in timespine performs I/O, so there is no
      transient failure class

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      TimespineError                          │
        │             (category, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  SeriesValidationError     InvalidParameterError  CodecError │
        │  (VALIDATION)              (CONFIG)               (PARSE)    │
        │       │                                                      │
        │  LengthMismatchError                                         │
        │  UnorderedInputError                                         │
        │  DuplicateKeyError                                           │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> from timespine.core.errors import LengthMismatchError
    >>> err = LengthMismatchError(keys_len=3, values_len=2)
    >>> err.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> err.context.metadata
    {'keys_len': 3, 'values_len': 2}

    Adding context on the way up:

    >>> err.with_context(operation="from_parallel_sequences").context.operation
    'from_parallel_sequences'

Tags:
    error-handling, exception-hierarchy, validation, timespine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Ordering, uniqueness and shape violations of series input
        CONFIG: Invalid parameters or settings
        PARSE: Codec decode failures
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"     # Ordering, uniqueness, length
    CONFIG = "CONFIG"             # Bad parameters, bad settings
    PARSE = "PARSE"               # Delimited / tagged decode
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``, so the dictionary can be
    passed straight to a structured logger.

    Attributes:
        operation: Name of the operation that failed (e.g. ``"from_points"``)
        position: Positional index of the offending point
        key: Offending key
        prior_key: Key immediately before the offending one
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    position: int | None = None
    key: Any = None
    prior_key: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for name in ("operation", "position", "key", "prior_key"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TimespineError(Exception):
    """
    Base exception for all timespine errors.

    Subclasses set ``default_category``; callers may override it per instance.

    Args:
        message: Human-readable description
        category: Overrides the class default category
        context: Structured metadata
        cause: Underlying exception, also chained as ``__cause__``
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TimespineError:
        """Add context fields in place and return self for chaining.

        Known ``ErrorContext`` fields are set directly; anything else lands in
        ``context.metadata``.
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "context": self.context.to_dict(),
        }
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# Validation errors (series shape and ordering)
# =============================================================================


class SeriesValidationError(TimespineError):
    """A series or a stream of points violates a structural invariant."""

    default_category = ErrorCategory.VALIDATION


class LengthMismatchError(SeriesValidationError):
    """Key and value sequences passed side by side differ in length."""

    def __init__(self, keys_len: int, values_len: int, *, operation: str | None = None):
        super().__init__(
            f"length mismatch: {keys_len} keys vs {values_len} values",
            context=ErrorContext(
                operation=operation,
                metadata={"keys_len": keys_len, "values_len": values_len},
            ),
        )
        self.keys_len = keys_len
        self.values_len = values_len


class UnorderedInputError(SeriesValidationError):
    """A key sorts before the key at the previous position."""

    def __init__(
        self,
        position: int,
        key: Any,
        prior_key: Any,
        *,
        operation: str | None = None,
    ):
        super().__init__(
            f"key {key!r} at position {position} sorts before prior key {prior_key!r}",
            context=ErrorContext(
                operation=operation, position=position, key=key, prior_key=prior_key
            ),
        )
        self.position = position
        self.key = key
        self.prior_key = prior_key


class DuplicateKeyError(SeriesValidationError):
    """A key is equal to the key at the previous position."""

    def __init__(self, position: int, key: Any, *, operation: str | None = None):
        super().__init__(
            f"duplicate key {key!r} at position {position}",
            context=ErrorContext(operation=operation, position=position, key=key),
        )
        self.position = position
        self.key = key


# =============================================================================
# Parameter and codec errors
# =============================================================================


class InvalidParameterError(TimespineError):
    """An operation was called with a parameter it cannot honour."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, name: str, value: Any, message: str | None = None):
        super().__init__(
            message or f"invalid value for {name}: {value!r}",
            context=ErrorContext(metadata={"parameter": name, "value": value}),
        )
        self.name = name
        self.value = value


class CodecError(TimespineError):
    """A delimited or tagged payload could not be decoded into points."""

    default_category = ErrorCategory.PARSE


def categorize_error(error: BaseException) -> ErrorCategory:
    """Best-effort category for any exception.

    Timespine errors report their own category; common builtins are mapped to
    the closest one; everything else is ``UNKNOWN``.
    """
    if isinstance(error, TimespineError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, (AssertionError, RuntimeError)):
        return ErrorCategory.INTERNAL
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TimespineError",
    "SeriesValidationError",
    "LengthMismatchError",
    "UnorderedInputError",
    "DuplicateKeyError",
    "InvalidParameterError",
    "CodecError",
    "categorize_error",
]
