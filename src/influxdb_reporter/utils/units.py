"""Time units used to convert rates and durations before reporting."""

from enum import Enum
from typing import Union


class TimeUnit(Enum):
    """Units of time, each valued by its length in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 60 * 60 * 1_000_000_000
    DAYS = 24 * 60 * 60 * 1_000_000_000

    @classmethod
    def parse(cls, unit: Union["TimeUnit", str]) -> "TimeUnit":
        """Resolve a TimeUnit from an instance or a case-insensitive name.

        Args:
            unit: TimeUnit member or its name (e.g. "seconds", "MILLISECONDS")

        Returns:
            Matching TimeUnit

        Raises:
            ValueError: If the name does not match any unit
        """
        if isinstance(unit, cls):
            return unit
        if isinstance(unit, str):
            key = unit.strip().upper()
            if key in cls.__members__:
                return cls.__members__[key]
        valid = ", ".join(cls.__members__)
        raise ValueError(f"Unknown time unit: {unit!r} (must be one of {valid})")

    def to_nanos(self, amount: float) -> float:
        return amount * self.value

    def to_seconds(self, amount: float) -> float:
        return amount * self.value / TimeUnit.SECONDS.value

    def rate_factor(self) -> float:
        """Multiplier turning an events-per-second rate into events per this unit."""
        return self.to_seconds(1)

    def duration_factor(self) -> float:
        """Multiplier turning a nanosecond duration into this unit."""
        return 1.0 / self.to_nanos(1)
