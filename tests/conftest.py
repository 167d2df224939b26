"""Shared fixtures for blockgrid tests."""
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from blockgrid.editor import MemoryStore, SessionController


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def session(store, clock):
    return SessionController(store=store, clock=clock)


@pytest.fixture(scope="session")
def qapp():
    from PyQt5.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
