"""Tests for spinecache.expiry and the background expiration of InMemoryStore."""

import gc
import threading
import time
import weakref

import pytest

from spinecache import InMemoryStore
from spinecache.expiry import ExpirySweeper


class _Collector:
    def __init__(self):
        self.batches: list[list[tuple[str, int]]] = []
        self.event = threading.Event()

    def __call__(self, batch):
        self.batches.append(batch)
        self.event.set()


class TestExpirySweeper:
    def test_lazy_thread_start(self):
        sweeper = ExpirySweeper(_Collector())
        assert not sweeper.is_running
        sweeper.schedule(time.monotonic() + 60, "k", 1)
        assert sweeper.is_running
        assert sweeper.pending == 1
        sweeper.stop()
        assert not sweeper.is_running
        assert sweeper.pending == 0

    def test_fires_due_entries(self):
        collector = _Collector()
        sweeper = ExpirySweeper(collector)
        try:
            sweeper.schedule(time.monotonic(), "k", 3)
            assert collector.event.wait(timeout=2.0)
            assert collector.batches[0] == [("k", 3)]
        finally:
            sweeper.stop()

    def test_earlier_deadline_wakes_sleeping_thread(self):
        collector = _Collector()
        sweeper = ExpirySweeper(collector)
        try:
            sweeper.schedule(time.monotonic() + 3600, "late", 1)
            sweeper.schedule(time.monotonic() + 0.05, "early", 2)
            assert collector.event.wait(timeout=2.0)
            assert collector.batches[0] == [("early", 2)]
            assert sweeper.pending == 1
        finally:
            sweeper.stop()

    def test_fires_in_deadline_order(self):
        fired: list[str] = []
        done = threading.Event()

        def on_expire(batch):
            fired.extend(key for key, _ in batch)
            if len(fired) == 3:
                done.set()

        sweeper = ExpirySweeper(on_expire)
        try:
            now = time.monotonic()
            sweeper.schedule(now + 0.15, "c", 3)
            sweeper.schedule(now + 0.05, "a", 1)
            sweeper.schedule(now + 0.10, "b", 2)
            assert done.wait(timeout=2.0)
            assert fired == ["a", "b", "c"]
        finally:
            sweeper.stop()

    def test_callback_failure_does_not_kill_thread(self):
        calls: list[list[tuple[str, int]]] = []
        second = threading.Event()

        def on_expire(batch):
            calls.append(batch)
            if len(calls) == 1:
                raise RuntimeError("boom")
            second.set()

        sweeper = ExpirySweeper(on_expire)
        try:
            sweeper.schedule(time.monotonic(), "a", 1)
            sweeper.schedule(time.monotonic() + 0.1, "b", 2)
            assert second.wait(timeout=2.0)
            assert sweeper.is_running
        finally:
            sweeper.stop()

    def test_schedule_after_stop_is_rejected(self):
        sweeper = ExpirySweeper(_Collector())
        sweeper.stop()
        assert sweeper.schedule(time.monotonic(), "k", 1) is False
        assert sweeper.pending == 0

    def test_stop_is_idempotent(self):
        sweeper = ExpirySweeper(_Collector())
        sweeper.schedule(time.monotonic() + 60, "k", 1)
        sweeper.stop()
        sweeper.stop()

    def test_lifecycle_logged_from_sweeper_thread(self, monkeypatch):
        events: list[tuple[str, str]] = []
        stopped = threading.Event()

        class Recorder:
            def debug(self, event, **kw):
                events.append((event, threading.current_thread().name))
                if event == "expiry_sweeper_stopped":
                    stopped.set()

        monkeypatch.setattr("spinecache.expiry.logger", Recorder())
        with InMemoryStore() as s:
            s.set("k", "v", 60)
        assert stopped.wait(timeout=2.0)
        assert events[0] == ("expiry_sweeper_started", ExpirySweeper.name)

    def test_dropped_store_is_collected_and_thread_exits(self):
        s = InMemoryStore()
        s.set("k", "v", 3600)
        sweeper = s._sweeper
        ref = weakref.ref(s)
        del s
        gc.collect()
        assert ref() is None
        assert not sweeper.is_running
        assert not sweeper._thread.is_alive()

    def test_bound_method_callback_held_weakly(self):
        collector = _Collector()
        sweeper = ExpirySweeper(collector.__call__)
        try:
            sweeper.schedule(time.monotonic() + 0.05, "k", 1)
            del collector
            gc.collect()
            sweeper._thread.join(timeout=2.0)
            assert not sweeper._thread.is_alive()
            assert sweeper.fired == 0
        finally:
            sweeper.stop()


@pytest.mark.slow
class TestBackgroundExpiry:
    def test_ttl_expiry(self, store):
        store.set("temp", "value", 1)
        assert store.exists("temp")
        time.sleep(1.1)
        assert not store.exists("temp")

    def test_late_expiry_does_not_delete_reused_key(self, store):
        store.set("k", "old", 1)
        store.reset()
        store.set("k", "new")
        time.sleep(1.2)
        assert store.get_or_fail("k") == "new"

    def test_set_if_not_exist_expires(self, store):
        assert store.set_if_not_exist("lock", "owner", 1)
        time.sleep(1.1)
        assert store.set_if_not_exist("lock", "next-owner", 0)

    def test_no_thread_without_ttl(self):
        with InMemoryStore() as s:
            s.set("k", "v")
            assert not s._sweeper.is_running

    def test_sweeper_reclaims_entry(self, store):
        store.set("temp", "value", 1)
        give_up = time.monotonic() + 3.0
        while "temp" in store._entries and time.monotonic() < give_up:
            time.sleep(0.05)
        assert "temp" not in store._entries
        assert store._sweeper.fired >= 1
