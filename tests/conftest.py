from datetime import datetime, timedelta, timezone

import pytest

from anynote.adapters.json_store import InMemoryRecordStore


class FakeClock:
    """Deterministic clock; each call advances by `step`."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def start():
    return datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(start):
    return FakeClock(start)


@pytest.fixture
def frozen_clock(start):
    return FakeClock(start, step=timedelta(0))


@pytest.fixture
def store():
    return InMemoryRecordStore()
