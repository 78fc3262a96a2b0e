"""
Structured error types for spinecache.

Every failure a cache operation can report is a subclass of ``CacheError``.
Errors carry a category for routing, the key involved, and the chained
underlying exception when one exists, so callers can log them as structured
events instead of parsing messages.

Manifesto:
    - **Typed errors:** One class per failure mode of the cache contract
    - **Raised, not returned:** Operations either complete or raise
    - **Chained causes:** Codec failures keep the original exception
    - **No internal handling:** The store never logs or retries errors

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                       CacheError                          │
        │            (category, key, context, cause)                │
        ├──────────────────────────────────────────────────────────┤
        │  NotFoundError         key absent at read time            │
        │  SerializationError    value cannot be encoded            │
        │  DeserializationError  stored text cannot be decoded      │
        │  NotAnIntegerError     counter on missing/non-numeric     │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> from spinecache import InMemoryStore, NotFoundError
    >>> store = InMemoryStore()
    >>> try:
    ...     store.get_or_fail("missing")
    ... except NotFoundError as e:
    ...     e.to_dict()["category"]
    'NOT_FOUND'

Tags:
    error-handling, exception-hierarchy, cache, spinecache
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories used to classify cache errors."""

    NOT_FOUND = "NOT_FOUND"  # Key absent or expired
    SERIALIZATION = "SERIALIZATION"  # Marshal / unmarshal failures
    VALUE = "VALUE"  # Stored value has the wrong form
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class CacheError(Exception):
    """
    Base exception for all spinecache errors.

    Subclasses set ``default_category``; instances may override it. The
    ``context`` dict holds any extra metadata worth logging alongside the
    error and is filled fluently with :meth:`with_context`.

    Examples:
        >>> err = CacheError("boom").with_context(backend="memory")
        >>> err.to_dict()
        {'error_type': 'CacheError', 'message': 'boom', 'category': 'INTERNAL', 'context': {'backend': 'memory'}}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.key = key
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CacheError:
        """Attach metadata to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.key is not None:
            result["key"] = self.key
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class NotFoundError(CacheError):
    """The key has no live entry."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"data not found: {key!r}", key=key, **kwargs)


class SerializationError(CacheError):
    """The value could not be encoded into the marshal format."""

    default_category = ErrorCategory.SERIALIZATION


class DeserializationError(CacheError):
    """The stored text could not be decoded into the requested shape."""

    default_category = ErrorCategory.SERIALIZATION


class NotAnIntegerError(CacheError):
    """
    Counter operation on a missing or non-integer value.

    ``sentinel`` mirrors the value the counter contract reports alongside the
    failure (``-1``), for adapters that need to surface it.
    """

    default_category = ErrorCategory.VALUE
    sentinel: int = -1

    def __init__(
        self,
        key: str,
        message: str | None = None,
        *,
        value: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message or f"value at {key!r} is not an integer", key=key, **kwargs)
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["sentinel"] = self.sentinel
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


__all__ = [
    "ErrorCategory",
    "CacheError",
    "NotFoundError",
    "SerializationError",
    "DeserializationError",
    "NotAnIntegerError",
]
