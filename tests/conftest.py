"""
Pytest configuration and shared fakes.

The scheduler takes its update source, transaction detector, emitter and
clock as arguments, so these fakes let tests drive it tick by tick without
spawning checkupdates or touching /var/lib/pacman.
"""

from collections import deque
from datetime import datetime

import pytest

from arch_updates_bar.exceptions import FetchError, FetchErrorKind
from arch_updates_bar.models import AppConfig, UpdateSnapshot
from arch_updates_bar.scheduler import Scheduler


def make_snapshot(count, fetched_at=None):
    """Snapshot with ``count`` synthetic checkupdates entries."""
    entries = [f"pkg{i} 1.0-1 -> 1.1-1" for i in range(count)]
    return UpdateSnapshot.from_entries(entries, fetched_at=fetched_at or datetime(2024, 1, 1, 12, 0))


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSource:
    """Update source returning queued results; the last one repeats."""

    def __init__(self, *results):
        self.results = deque(results or [make_snapshot(0)])
        self.calls = 0

    def push(self, result):
        self.results.append(result)

    def fetch_updates(self):
        self.calls += 1
        result = self.results.popleft() if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, int):
            return make_snapshot(result)
        return result


class FakeDetector:
    """Transaction detector whose answer tests flip directly."""

    def __init__(self, active=False):
        self.active = active
        self.calls = 0

    def is_transaction_active(self):
        self.calls += 1
        if isinstance(self.active, BaseException):
            raise self.active
        return self.active


class ListEmitter:
    """Collects emitted display states."""

    def __init__(self):
        self.states = []

    def emit(self, state):
        self.states.append(state)

    @property
    def last(self):
        return self.states[-1]


@pytest.fixture
def app_config():
    return AppConfig(interval_in_seconds=1200, warning_threshold=25, critical_threshold=100)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def emitter():
    return ListEmitter()


@pytest.fixture
def scheduler(app_config, source, detector, emitter, clock):
    return Scheduler(
        config=app_config,
        source=source,
        detector=detector,
        emitter=emitter,
        clock=clock,
        sleep=clock.advance,
    )


@pytest.fixture
def fetch_timeout():
    return FetchError(FetchErrorKind.TIMEOUT, "checkupdates did not finish within 120s")
