"""
Shared pytest fixtures for spinecache tests.

This module provides:
- A store fixture that is closed after each test
- A manually advanced monotonic clock for deterministic expiry tests

Usage:
    def test_something(store):
        store.set("k", "v")

    def test_expiry(clock, manual_store):
        manual_store.set("k", "v", 5)
        clock.advance(5)
        assert not manual_store.exists("k")
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure spinecache package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spinecache import InMemoryStore


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store() -> Generator[InMemoryStore, None, None]:
    """Store with the background sweeper enabled, closed after the test."""
    s = InMemoryStore()
    yield s
    s.close()


@pytest.fixture
def manual_store(clock: ManualClock) -> Generator[InMemoryStore, None, None]:
    """Store driven by ``clock`` with no sweeper thread."""
    s = InMemoryStore(background_expiry=False, clock=clock)
    yield s
    s.close()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SPINECACHE_* variables that could leak into settings tests."""
    import os

    for name in list(os.environ):
        if name.startswith("SPINECACHE_"):
            monkeypatch.delenv(name, raising=False)
