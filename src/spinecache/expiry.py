"""Deadline-ordered expiration sweeper.

One daemon thread serves every TTL-bearing insertion of a store. Pending
expirations live in a min-heap of ``(deadline, insertion_id, key)``; the
thread sleeps on a condition until the earliest deadline, pops everything
that is due and hands the batch to the store's callback.

┌──────────────────────────────────────────────────────────────────────────┐
│  schedule(deadline, key, id) ──► heap push ──► notify if new earliest     │
│                                                                           │
│  Daemon Thread (loop)                                                     │
│     while not stopped:                                                    │
│         wait until heap[0].deadline  (or until notified)                  │
│         pop all due (key, id) pairs                                       │
│         on_expire(batch)        ◄── store deletes only matching ids       │
│                                                                           │
│  stop() ──► stopped = True, notify, join(timeout=5.0)                     │
└──────────────────────────────────────────────────────────────────────────┘

Scheduled expirations are never cancelled. A removal that arrives after
its key was reset, removed or overwritten is discarded by the store because
the insertion id no longer matches.
"""

from __future__ import annotations

import heapq
import inspect
import threading
import time
import weakref
from collections.abc import Callable

from spinecache.logging import get_logger

logger = get_logger(__name__)

ExpireCallback = Callable[[list[tuple[str, int]]], object]


class ExpirySweeper:
    """Single background thread that fires due expirations in deadline order.

    The thread is started lazily by the first :meth:`schedule` call, so a
    store that never uses TTLs never owns a thread. A bound-method callback
    is held weakly: once its owner is collected the thread exits.

    Example:
        >>> sweeper = ExpirySweeper(lambda batch: print(batch))
        >>> sweeper.schedule(time.monotonic() + 1, "session:abc", 7)
        True
        >>> sweeper.stop()
    """

    name = "spinecache-expiry"

    def __init__(
        self,
        on_expire: ExpireCallback,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if inspect.ismethod(on_expire):
            self._on_expire: Callable[[], ExpireCallback | None] = weakref.WeakMethod(on_expire)
        else:
            self._on_expire = lambda: on_expire
        self._clock = clock
        self._heap: list[tuple[float, int, str]] = []
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._stopped = False
        self._fired = 0

    def schedule(self, deadline: float, key: str, insertion_id: int) -> bool:
        """Queue an expiration; returns False once the sweeper is stopped."""
        with self._cond:
            if self._stopped:
                return False
            heapq.heappush(self._heap, (deadline, insertion_id, key))
            if self._thread is None:
                self._start()
            elif self._heap[0][1] == insertion_id:
                self._cond.notify()
        return True

    def _start(self) -> None:
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self.name)
        self._thread.start()

    def _next_batch(self) -> list[tuple[str, int]] | None:
        with self._cond:
            while not self._stopped:
                if not self._heap:
                    self._cond.wait()
                    continue
                delay = self._heap[0][0] - self._clock()
                if delay > 0:
                    self._cond.wait(timeout=delay)
                    continue
                now = self._clock()
                due: list[tuple[str, int]] = []
                while self._heap and self._heap[0][0] <= now:
                    _, insertion_id, key = heapq.heappop(self._heap)
                    due.append((key, insertion_id))
                return due
            return None

    def _dispatch(self, batch: list[tuple[str, int]]) -> bool:
        on_expire = self._on_expire()
        if on_expire is None:
            return False
        try:
            on_expire(batch)
        except Exception as e:
            logger.exception("expiry_batch_failed", error=str(e), batch_size=len(batch))
        self._fired += len(batch)
        return True

    def _loop(self) -> None:
        logger.debug("expiry_sweeper_started", thread=self.name)
        while True:
            batch = self._next_batch()
            if batch is None or not self._dispatch(batch):
                break
        logger.debug("expiry_sweeper_stopped", thread=self.name, fired=self._fired)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the sweeper thread; pending expirations are dropped."""
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            self._heap.clear()
            self._cond.notify_all()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("expiry_sweeper_stop_timeout", thread=self.name, timeout=timeout)

    @property
    def pending(self) -> int:
        """Number of scheduled expirations not yet fired."""
        with self._cond:
            return len(self._heap)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped

    @property
    def fired(self) -> int:
        """Expirations handed to the callback so far, stale ones included."""
        return self._fired


__all__ = ["ExpirySweeper", "ExpireCallback"]
