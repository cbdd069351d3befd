"""In-process metric types: gauges, counters, histograms, meters and timers."""

import logging
import math
import threading
import time
from typing import Any, Callable, Optional

from ..utils.units import TimeUnit
from .snapshot import Reservoir, Snapshot, UniformReservoir

logger = logging.getLogger(__name__)

# Meter moving averages are advanced on a fixed 5 second tick
TICK_INTERVAL_NS = 5 * TimeUnit.SECONDS.value
TICK_INTERVAL_S = 5.0


class Clock:
    """Source of time for meters, timers and report timestamps."""

    def tick(self) -> int:
        """Monotonic time in nanoseconds."""
        return time.monotonic_ns()

    def time(self) -> int:
        """Wall-clock time in epoch milliseconds."""
        return int(time.time() * 1000)


DEFAULT_CLOCK = Clock()


class Metric:
    """Marker base class for everything a MetricRegistry holds."""


class Gauge(Metric):
    """Instantaneous value read from a callable at report time."""

    def __init__(self, value_fn: Callable[[], Any]):
        self._value_fn = value_fn

    def get_value(self) -> Any:
        return self._value_fn()


class SettableGauge(Gauge):
    """Gauge whose value is pushed by the application."""

    def __init__(self, initial_value: Any = None):
        self._value = initial_value
        super().__init__(lambda: self._value)

    def set_value(self, value: Any) -> None:
        self._value = value


class Counter(Metric):
    """Count that may be incremented and decremented (and therefore reset)."""

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def get_count(self) -> int:
        return self._count


class Histogram(Metric):
    """Distribution of values backed by a sampling reservoir."""

    def __init__(self, reservoir: Optional[Reservoir] = None):
        self.reservoir = reservoir if reservoir is not None else UniformReservoir()
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            self.reservoir.update(value)

    def get_count(self) -> int:
        return self._count

    def get_snapshot(self) -> Snapshot:
        with self._lock:
            return self.reservoir.get_snapshot()


class EWMA:
    """Exponentially-weighted moving average of a per-second rate.

    ``update`` accumulates events; ``tick`` folds them into the average and
    must be called once per tick interval.
    """

    def __init__(self, alpha: float, interval_s: float = TICK_INTERVAL_S):
        self.alpha = alpha
        self.interval_s = interval_s
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def for_minutes(cls, minutes: int) -> "EWMA":
        return cls(1.0 - math.exp(-TICK_INTERVAL_S / 60.0 / minutes))

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        count = self._uncounted
        self._uncounted = 0
        instant_rate = count / self.interval_s
        if self._initialized:
            self._rate += self.alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    def get_rate(self) -> float:
        """Current rate in events per second."""
        return self._rate


class Meter(Metric):
    """Rate of events: mean rate plus 1, 5 and 15 minute moving averages."""

    def __init__(self, clock: Clock = DEFAULT_CLOCK):
        self.clock = clock
        self._count = 0
        self._m1 = EWMA.for_minutes(1)
        self._m5 = EWMA.for_minutes(5)
        self._m15 = EWMA.for_minutes(15)
        self._start_time = clock.tick()
        self._last_tick = self._start_time
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def _tick_if_necessary(self) -> None:
        new_tick = self.clock.tick()
        age = new_tick - self._last_tick
        if age > TICK_INTERVAL_NS:
            self._last_tick = new_tick - age % TICK_INTERVAL_NS
            for _ in range(age // TICK_INTERVAL_NS):
                self._m1.tick()
                self._m5.tick()
                self._m15.tick()

    def get_count(self) -> int:
        return self._count

    def get_mean_rate(self) -> float:
        if self._count == 0:
            return 0.0
        elapsed_s = (self.clock.tick() - self._start_time) / TimeUnit.SECONDS.value
        if elapsed_s <= 0:
            return 0.0
        return self._count / elapsed_s

    def get_one_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._m1.get_rate()

    def get_five_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._m5.get_rate()

    def get_fifteen_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._m15.get_rate()


class _TimerContext:
    """Context manager recording the elapsed time of a block into a Timer."""

    def __init__(self, timer: "Timer"):
        self._timer = timer
        self._start = timer.clock.tick()

    def stop(self) -> int:
        elapsed = self._timer.clock.tick() - self._start
        self._timer.update(elapsed, TimeUnit.NANOSECONDS)
        return elapsed

    def __enter__(self) -> "_TimerContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


class Timer(Metric):
    """Histogram of durations (stored in nanoseconds) plus a Meter of call rate."""

    def __init__(self, clock: Clock = DEFAULT_CLOCK, reservoir: Optional[Reservoir] = None):
        self.clock = clock
        self._meter = Meter(clock)
        self._histogram = Histogram(reservoir)

    def update(self, duration: float, unit: TimeUnit = TimeUnit.NANOSECONDS) -> None:
        if duration < 0:
            logger.debug(f"Ignoring negative timer duration: {duration}")
            return
        self._histogram.update(unit.to_nanos(duration))
        self._meter.mark()

    def time(self) -> _TimerContext:
        return _TimerContext(self)

    def get_count(self) -> int:
        return self._histogram.get_count()

    def get_snapshot(self) -> Snapshot:
        return self._histogram.get_snapshot()

    def get_mean_rate(self) -> float:
        return self._meter.get_mean_rate()

    def get_one_minute_rate(self) -> float:
        return self._meter.get_one_minute_rate()

    def get_five_minute_rate(self) -> float:
        return self._meter.get_five_minute_rate()

    def get_fifteen_minute_rate(self) -> float:
        return self._meter.get_fifteen_minute_rate()
