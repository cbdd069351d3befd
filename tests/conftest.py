"""Shared fixtures."""

import pytest

from influxdb_reporter.registry import Clock


class FakeClock(Clock):
    """Clock advanced by hand."""

    def __init__(self, start_millis: int = 1_700_000_000_000):
        self.nanos = 0
        self.millis = start_millis

    def tick(self) -> int:
        return self.nanos

    def time(self) -> int:
        return self.millis

    def advance(self, seconds: float) -> None:
        self.nanos += int(seconds * 1_000_000_000)
        self.millis += int(seconds * 1000)


@pytest.fixture
def fake_clock():
    return FakeClock()
