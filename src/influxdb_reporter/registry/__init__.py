"""In-process metrics registry module."""

from .metric_registry import MetricFilter, MetricRegistry
from .metrics import Clock, Counter, Gauge, Histogram, Meter, Metric, SettableGauge, Timer
from .snapshot import SlidingWindowReservoir, Snapshot, UniformReservoir

__all__ = [
    "Clock",
    "Counter",
    "Gauge",
    "Histogram",
    "Meter",
    "Metric",
    "MetricFilter",
    "MetricRegistry",
    "SettableGauge",
    "SlidingWindowReservoir",
    "Snapshot",
    "Timer",
    "UniformReservoir",
]
