"""Shared fixtures: a controllable clock, an in-memory store and a recorder."""

import datetime

import pytest

from aerocheck.recorder import FlightRecorder
from aerocheck.storage import MemoryStore

T0 = datetime.datetime(2025, 3, 1, 9, 0, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime.datetime = T0):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> datetime.datetime:
        self.now += datetime.timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def recorder(store, clock):
    return FlightRecorder(store, clock=clock)
