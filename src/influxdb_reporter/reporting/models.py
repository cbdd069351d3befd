"""Data models for report cycles."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional


class MetricCategory(Enum):
    """Metric categories, declared in the order a report cycle processes them."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"
    METER = "meter"
    TIMER = "timer"


@dataclass
class InfluxDbPoint:
    """One reported observation handed to the sender."""

    measurement: str
    tags: Optional[Dict[str, str]]
    timestamp: str  # epoch milliseconds as text
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        point = {
            "measurement": self.measurement,
            "timestamp": self.timestamp,
            "fields": dict(self.fields),
        }
        if self.tags:
            point["tags"] = dict(self.tags)
        return point


class PreviousValueTable:
    """Last observed count per metric name, used for idle-metric suppression.

    Instances are never mutated once handed out; a report cycle builds the
    next table with ``with_updates`` and the reporter swaps it in only when
    the cycle succeeds.
    """

    def __init__(self, values: Optional[Mapping[str, int]] = None):
        self._values: Dict[str, int] = dict(values or {})

    def get(self, name: str) -> Optional[int]:
        return self._values.get(name)

    def with_updates(self, updates: Mapping[str, int]) -> "PreviousValueTable":
        if not updates:
            return self
        merged = dict(self._values)
        merged.update(updates)
        return PreviousValueTable(merged)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PreviousValueTable):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"PreviousValueTable({self._values!r})"
