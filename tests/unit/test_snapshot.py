"""
Unit tests for snapshots and reservoirs.
"""

import math

import pytest
from influxdb_reporter.registry.snapshot import (
    Reservoir,
    Snapshot,
    SlidingWindowReservoir,
    UniformReservoir,
)


class TestSnapshot:
    """Test snapshot statistics."""

    def test_quantiles_interpolate(self):
        """Test quantile interpolation at q * (n + 1)."""
        snapshot = Snapshot([5, 1, 2, 3, 4])

        assert snapshot.get_median() == 3.0
        assert snapshot.get_75th_percentile() == 4.5
        assert snapshot.get_value(0.0) == 1.0
        assert snapshot.get_value(1.0) == 5.0
        assert snapshot.get_99th_percentile() == 5.0

    def test_summary_statistics(self):
        """Test min, max, mean and sample standard deviation."""
        snapshot = Snapshot([1, 2, 3, 4, 5])

        assert snapshot.size() == 5
        assert snapshot.get_min() == 1.0
        assert snapshot.get_max() == 5.0
        assert snapshot.get_mean() == 3.0
        assert snapshot.get_std_dev() == pytest.approx(math.sqrt(2.5))

    def test_empty_snapshot(self):
        """Test that an empty snapshot reports zeros."""
        snapshot = Snapshot([])

        assert snapshot.size() == 0
        assert snapshot.get_min() == 0.0
        assert snapshot.get_max() == 0.0
        assert snapshot.get_mean() == 0.0
        assert snapshot.get_std_dev() == 0.0
        assert snapshot.get_median() == 0.0

    def test_single_value_has_no_spread(self):
        snapshot = Snapshot([7])
        assert snapshot.get_std_dev() == 0.0
        assert snapshot.get_999th_percentile() == 7.0

    def test_invalid_quantile(self):
        """Test that quantiles outside [0, 1] are rejected."""
        snapshot = Snapshot([1, 2, 3])
        with pytest.raises(ValueError):
            snapshot.get_value(1.5)
        with pytest.raises(ValueError):
            snapshot.get_value(-0.1)

    def test_snapshot_is_a_copy(self):
        values = [3, 1, 2]
        snapshot = Snapshot(values)
        values.append(100)
        assert snapshot.get_max() == 3.0


class TestReservoirs:
    """Test value reservoirs."""

    def test_sliding_window_keeps_latest(self):
        reservoir = SlidingWindowReservoir(3)
        for value in range(1, 6):
            reservoir.update(value)

        assert reservoir.size() == 3
        assert list(reservoir.get_snapshot().get_values()) == [3.0, 4.0, 5.0]

    def test_uniform_reservoir_is_bounded(self):
        """Test that the uniform reservoir never exceeds its capacity."""
        reservoir = UniformReservoir(size=10, seed=1)
        for value in range(100):
            reservoir.update(value)

        snapshot = reservoir.get_snapshot()
        assert reservoir.size() == 10
        assert snapshot.size() == 10
        assert snapshot.get_min() >= 0
        assert snapshot.get_max() <= 99

    def test_uniform_reservoir_below_capacity_keeps_everything(self):
        reservoir = UniformReservoir(size=10)
        for value in (4, 2, 9):
            reservoir.update(value)

        assert list(reservoir.get_snapshot().get_values()) == [2.0, 4.0, 9.0]

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            UniformReservoir(size=0)
        with pytest.raises(ValueError):
            SlidingWindowReservoir(0)

    def test_reservoir_base_is_abstract(self):
        with pytest.raises(TypeError):
            Reservoir()

    def test_incomplete_reservoir_cannot_be_built(self):
        """Test that a subclass missing get_snapshot is rejected."""

        class PartialReservoir(Reservoir):
            def size(self):
                return 0

            def update(self, value):
                pass

        with pytest.raises(TypeError):
            PartialReservoir()
