"""Statistical snapshots and sampling reservoirs for histograms and timers."""

import math
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Optional

import numpy as np

DEFAULT_RESERVOIR_SIZE = 1028


class Snapshot:
    """Immutable statistical view over a set of recorded values.

    Values are copied and sorted on construction, so later updates to the
    owning histogram never change an existing snapshot.
    """

    def __init__(self, values: Iterable[float]):
        self._values = np.sort(np.asarray(list(values), dtype=np.float64))

    def size(self) -> int:
        return int(self._values.size)

    def get_values(self) -> np.ndarray:
        return self._values.copy()

    def get_value(self, quantile: float) -> float:
        """Return the value at the given quantile.

        Uses linear interpolation at position ``quantile * (n + 1)``, clamped to
        the smallest and largest recorded value.

        Args:
            quantile: Quantile in the range [0, 1]

        Returns:
            Interpolated value, or 0.0 for an empty snapshot
        """
        if not 0.0 <= quantile <= 1.0:
            raise ValueError(f"{quantile} is not in [0..1]")

        n = self._values.size
        if n == 0:
            return 0.0

        pos = quantile * (n + 1)
        index = int(pos)

        if index < 1:
            return float(self._values[0])
        if index >= n:
            return float(self._values[-1])

        lower = self._values[index - 1]
        upper = self._values[index]
        return float(lower + (pos - math.floor(pos)) * (upper - lower))

    def get_median(self) -> float:
        return self.get_value(0.5)

    def get_75th_percentile(self) -> float:
        return self.get_value(0.75)

    def get_95th_percentile(self) -> float:
        return self.get_value(0.95)

    def get_98th_percentile(self) -> float:
        return self.get_value(0.98)

    def get_99th_percentile(self) -> float:
        return self.get_value(0.99)

    def get_999th_percentile(self) -> float:
        return self.get_value(0.999)

    def get_min(self) -> float:
        if self._values.size == 0:
            return 0.0
        return float(np.min(self._values))

    def get_max(self) -> float:
        if self._values.size == 0:
            return 0.0
        return float(np.max(self._values))

    def get_mean(self) -> float:
        if self._values.size == 0:
            return 0.0
        return float(np.mean(self._values))

    def get_std_dev(self) -> float:
        """Sample standard deviation (n - 1 denominator)."""
        if self._values.size <= 1:
            return 0.0
        return float(np.std(self._values, ddof=1))


class Reservoir(ABC):
    """Base class for value stores backing a histogram."""

    @abstractmethod
    def size(self) -> int:
        """Number of values currently held."""
        pass

    @abstractmethod
    def update(self, value: float) -> None:
        """Record a value."""
        pass

    @abstractmethod
    def get_snapshot(self) -> Snapshot:
        """Return an immutable view of the held values."""
        pass


class UniformReservoir(Reservoir):
    """Random sample of all recorded values using reservoir sampling (algorithm R).

    Every value ever recorded has the same probability of being in the sample,
    regardless of how many values have been recorded.
    """

    def __init__(self, size: int = DEFAULT_RESERVOIR_SIZE, seed: Optional[int] = None):
        if size <= 0:
            raise ValueError(f"Reservoir size must be positive, got {size}")
        self.capacity = size
        self._values = np.zeros(size, dtype=np.float64)
        self._count = 0
        self._rng = np.random.default_rng(seed)

    def size(self) -> int:
        return min(self._count, self.capacity)

    def update(self, value: float) -> None:
        self._count += 1
        if self._count <= self.capacity:
            self._values[self._count - 1] = value
        else:
            # Keep the new value with probability capacity / count
            r = int(self._rng.integers(0, self._count))
            if r < self.capacity:
                self._values[r] = value

    def get_snapshot(self) -> Snapshot:
        return Snapshot(self._values[:self.size()])


class SlidingWindowReservoir(Reservoir):
    """Keeps only the most recent ``size`` values."""

    def __init__(self, size: int = DEFAULT_RESERVOIR_SIZE):
        if size <= 0:
            raise ValueError(f"Reservoir size must be positive, got {size}")
        self._window = deque(maxlen=size)

    def size(self) -> int:
        return len(self._window)

    def update(self, value: float) -> None:
        self._window.append(value)

    def get_snapshot(self) -> Snapshot:
        return Snapshot(self._window)
