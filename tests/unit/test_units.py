"""
Unit tests for time unit conversion.
"""

import pytest
from influxdb_reporter.utils.units import TimeUnit


class TestTimeUnit:
    """Test parsing and conversion factors."""

    def test_parse(self):
        assert TimeUnit.parse("seconds") is TimeUnit.SECONDS
        assert TimeUnit.parse(" MILLISECONDS ") is TimeUnit.MILLISECONDS
        assert TimeUnit.parse(TimeUnit.HOURS) is TimeUnit.HOURS

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown time unit"):
            TimeUnit.parse("fortnights")
        with pytest.raises(ValueError):
            TimeUnit.parse(5)

    def test_rate_factor(self):
        """Test that per-second rates scale to the unit's length."""
        assert TimeUnit.SECONDS.rate_factor() == 1.0
        assert TimeUnit.MINUTES.rate_factor() == 60.0
        assert TimeUnit.MILLISECONDS.rate_factor() == pytest.approx(0.001)

    def test_duration_factor(self):
        """Test that nanosecond durations scale into the unit."""
        assert TimeUnit.NANOSECONDS.duration_factor() == 1.0
        assert 5_000_000 * TimeUnit.MILLISECONDS.duration_factor() == pytest.approx(5.0)
        assert 3_000_000_000 * TimeUnit.SECONDS.duration_factor() == pytest.approx(3.0)

    def test_conversions(self):
        assert TimeUnit.MICROSECONDS.to_nanos(2) == 2000
        assert TimeUnit.DAYS.to_seconds(1) == 86400
