"""
The cache contract shared by every backend.

``CacheContract`` is the interface application code depends on. The
in-memory store implements it here; a remote-cache adapter can implement it
structurally without importing anything from this package.

Architecture:
    ::

        CacheContract (Protocol)
        ├── InMemoryStore    : this package (single process)
        └── <remote adapter> : external, same method set

        Reads:    exists, get_or_fail, get, get_int64, get_marshal
        Writes:   set, set_if_not_exist, set_marshal, incr
        Removal:  remove, remove_prefix, reset

Tags:
    cache, protocol, contract, spinecache
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheContract(Protocol):
    """Protocol for string key/value caches with TTL support.

    TTLs are whole seconds; ``0`` or negative means the entry never expires.
    Failures are raised as :class:`~spinecache.errors.CacheError` subclasses.
    """

    def exists(self, key: str) -> bool:
        """Check whether ``key`` currently has an entry."""
        ...

    def get_or_fail(self, key: str) -> str:
        """Return the value at ``key``; raise ``NotFoundError`` if absent."""
        ...

    def get(self, key: str, fallback: str = "") -> str:
        """Return the value at ``key``, or ``fallback`` if absent."""
        ...

    def get_int64(self, key: str, fallback: int = 0) -> int:
        """Return the value at ``key`` as an integer, or ``fallback``."""
        ...

    def set(self, key: str, value: str, ttl_seconds: int = 0) -> None:
        """Insert or overwrite ``key``."""
        ...

    def set_if_not_exist(self, key: str, value: str, ttl_seconds: int = 0) -> bool:
        """Insert ``key`` only if absent; True if stored."""
        ...

    def set_marshal(self, key: str, value: Any, ttl_seconds: int = 0) -> None:
        """Store ``value`` in the marshal format."""
        ...

    def get_marshal(self, key: str, into: Any = None) -> Any:
        """Decode the marshalled value at ``key``, optionally into a type."""
        ...

    def remove(self, key: str) -> None:
        """Delete ``key``; no-op when absent."""
        ...

    def remove_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``."""
        ...

    def incr(self, key: str) -> int:
        """Atomically increment the integer at ``key``."""
        ...

    def reset(self) -> None:
        """Remove every entry."""
        ...


__all__ = ["CacheContract"]
