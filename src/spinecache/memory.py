"""
In-memory implementation of the cache contract.

Manifesto:
    The in-memory store is the drop-in stand-in for a remote cache: same
    contract, no network, safe to share between threads. Everything it holds
    is a string; structured values and counters are conveniences layered on
    top of the raw string operations.

    - **One guard:** A single RLock covers every read and every write
    - **Insertion-bound expiry:** A TTL belongs to one insertion, not a key
    - **One sweeper:** A heap and a daemon thread instead of a timer per key
    - **Owned instance:** No module-level store; build as many as you need

Architecture:
    ::

        InMemoryStore
        ├── _entries: dict[str, _Entry(value, insertion_id, deadline)]
        ├── _lock: RLock                 (held for O(1)/O(n) in-memory work)
        ├── _ids: itertools.count        (advanced under _lock)
        └── _sweeper: ExpirySweeper      (heap + daemon thread, lazy start)

        set(k, v, ttl) ──► new insertion id ──► sweeper.schedule(deadline, k, id)
        sweeper fires  ──► _expire_batch([(k, id)]) ──► delete iff entry.id == id

Examples:
    >>> from spinecache import InMemoryStore
    >>> with InMemoryStore() as store:
    ...     store.set("user:1", "alice", 60)
    ...     store.set("hits", "5")
    ...     store.incr("hits")
    ...     store.remove_prefix("user:")
    ...     store.exists("user:1")
    6
    False

Performance:
    - get/set/exists/incr: O(1) under the lock
    - remove_prefix / purge_expired / size: O(entries) under the lock
    - TTL scheduling: O(log n) heap push

Guardrails:
    ❌ DON'T: Share one store across processes (nothing is shared)
    ✅ DO: Hand one store instance to every consumer in the process

Tags:
    cache, in-memory, ttl, thread-safe, spinecache
"""

from __future__ import annotations

import itertools
import threading
import time
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from spinecache.codec import INT64_MAX, marshal, parse_int64, unmarshal
from spinecache.errors import NotAnIntegerError, NotFoundError
from spinecache.expiry import ExpirySweeper
from spinecache.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _Entry:
    value: str
    insertion_id: int
    deadline: float | None = None

    def expired(self, now: float) -> bool:
        return self.deadline is not None and now >= self.deadline


class InMemoryStore:
    """Thread-safe string cache with per-insertion expiration.

    Attributes:
        auto_init_counters: When True, ``incr`` on a missing key starts
            from 0 instead of raising ``NotAnIntegerError``.

    Example:
        store = InMemoryStore()
        store.set("session:abc", "42", ttl_seconds=3600)
        store.get("session:abc")        # "42"
        store.set_marshal("cfg", {"retries": 3})
        store.get_marshal("cfg")        # {"retries": 3}
        store.close()
    """

    def __init__(
        self,
        *,
        background_expiry: bool = True,
        auto_init_counters: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize an empty store.

        Args:
            background_expiry: Run a sweeper thread that removes entries at
                their deadline. Without it, expired entries are invisible to
                reads and reclaimed by :meth:`purge_expired` or overwrites.
            auto_init_counters: Treat a missing key as ``"0"`` in ``incr``.
            clock: Monotonic time source in seconds.
        """
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._clock = clock
        self.auto_init_counters = auto_init_counters
        self._sweeper: ExpirySweeper | None = (
            ExpirySweeper(self._expire_batch, clock=clock) if background_expiry else None
        )
        # stops the thread when the store is dropped without close()
        self._finalizer = weakref.finalize(self, self._sweeper.stop) if self._sweeper is not None else None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Stop the background sweeper. Safe to call more than once."""
        if self._finalizer is not None:
            self._finalizer()

    def __enter__(self) -> InMemoryStore:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Internal helpers (caller holds _lock)
    # ------------------------------------------------------------------ #

    def _live(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None or entry.expired(self._clock()):
            return None
        return entry

    def _insert(self, key: str, value: str, ttl_seconds: int) -> None:
        insertion_id = next(self._ids)
        deadline = self._clock() + ttl_seconds if ttl_seconds > 0 else None
        self._entries[key] = _Entry(value, insertion_id, deadline)
        if deadline is not None and self._sweeper is not None:
            self._sweeper.schedule(deadline, key, insertion_id)

    def _expire_batch(self, batch: list[tuple[str, int]]) -> None:
        removed = 0
        with self._lock:
            for key, insertion_id in batch:
                entry = self._entries.get(key)
                if entry is not None and entry.insertion_id == insertion_id:
                    del self._entries[key]
                    removed += 1
        logger.debug("cache_entries_expired", removed=removed, stale=len(batch) - removed)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def exists(self, key: str) -> bool:
        """True iff ``key`` has a live entry. Never touches expiration."""
        with self._lock:
            return self._live(key) is not None

    def get_or_fail(self, key: str) -> str:
        """Return the value stored at ``key``.

        Raises:
            NotFoundError: If the key is absent or expired.
        """
        with self._lock:
            entry = self._live(key)
            if entry is None:
                raise NotFoundError(key)
            return entry.value

    def get(self, key: str, fallback: str = "") -> str:
        """Return the value at ``key``, or ``fallback`` if absent."""
        try:
            return self.get_or_fail(key)
        except NotFoundError:
            return fallback

    def get_int64(self, key: str, fallback: int = 0) -> int:
        """Return the value at ``key`` parsed as a base-10 int64.

        Absent keys and values that do not parse both yield ``fallback``.
        """
        parsed = parse_int64(self.get(key, str(fallback)))
        return fallback if parsed is None else parsed

    def get_marshal(self, key: str, into: Any = None) -> Any:
        """Decode the JSON value stored at ``key``.

        Args:
            key: Cache key.
            into: Optional target type (``BaseModel`` subclass, dataclass,
                ``list[int]``, ...). ``None`` returns plain JSON data.

        Raises:
            NotFoundError: If the key is absent or expired.
            DeserializationError: If the stored text does not decode into
                the requested shape.
        """
        return unmarshal(self.get_or_fail(key), into, key=key)

    def size(self) -> int:
        """Number of live entries."""
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if not entry.expired(now))

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def set(self, key: str, value: str, ttl_seconds: int = 0) -> None:
        """Insert or overwrite ``key``; ``ttl_seconds <= 0`` never expires."""
        with self._lock:
            self._insert(key, value, ttl_seconds)

    def set_if_not_exist(self, key: str, value: str, ttl_seconds: int = 0) -> bool:
        """Insert only when ``key`` has no live entry.

        Returns:
            True if the value was stored, False if the key already existed.
        """
        with self._lock:
            if self._live(key) is not None:
                return False
            self._insert(key, value, ttl_seconds)
            return True

    def set_marshal(self, key: str, value: Any, ttl_seconds: int = 0) -> None:
        """Store ``value`` encoded as JSON.

        Raises:
            SerializationError: If ``value`` cannot be encoded; nothing is written.
        """
        encoded = marshal(value)
        self.set(key, encoded, ttl_seconds)

    def incr(self, key: str) -> int:
        """Atomically add 1 to the integer stored at ``key``.

        The entry keeps its expiration deadline.

        Returns:
            The incremented value.

        Raises:
            NotAnIntegerError: If the key is missing (unless
                ``auto_init_counters``), holds a non-integer, or would
                overflow int64. The stored value is left untouched.
        """
        with self._lock:
            entry = self._live(key)
            if entry is None:
                if not self.auto_init_counters:
                    raise NotAnIntegerError(key, f"no value at {key!r} to increment")
                self._insert(key, "1", 0)
                return 1

            current = parse_int64(entry.value)
            if current is None:
                raise NotAnIntegerError(key, value=entry.value)
            if current == INT64_MAX:
                raise NotAnIntegerError(key, f"incrementing {key!r} overflows int64", value=entry.value)

            entry.value = str(current + 1)
            return current + 1

    def remove(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def remove_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix`` (``""`` matches all)."""
        with self._lock:
            for key in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[key]

    def reset(self) -> None:
        """Discard every entry.

        Pending expirations still fire later and are ignored, since no new
        entry can carry an old insertion id.
        """
        with self._lock:
            discarded = len(self._entries)
            self._entries = {}
        logger.debug("cache_reset", discarded=discarded)

    def purge_expired(self) -> int:
        """Remove entries whose deadline has passed; returns how many."""
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._entries.items() if entry.expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)


def in_memory(**kwargs: Any) -> InMemoryStore:
    """Build an :class:`InMemoryStore`; keyword arguments pass through."""
    return InMemoryStore(**kwargs)


__all__ = ["InMemoryStore", "in_memory"]
