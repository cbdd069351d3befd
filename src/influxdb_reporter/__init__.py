"""Periodic reporting of in-process metrics to InfluxDB."""

from .registry import (
    Clock,
    Counter,
    Gauge,
    Histogram,
    Meter,
    MetricFilter,
    MetricRegistry,
    SettableGauge,
    Timer,
)
from .reporting import (
    InfluxDbPoint,
    InfluxDbReporter,
    InfluxDbSender,
    InMemoryInfluxDbSender,
    PreviousValueTable,
)
from .scheduling import ScheduledReporter
from .utils import ConfigurationError, TimeUnit

__version__ = "0.1.0"

__all__ = [
    "Clock",
    "ConfigurationError",
    "Counter",
    "Gauge",
    "Histogram",
    "InfluxDbPoint",
    "InfluxDbReporter",
    "InfluxDbSender",
    "InMemoryInfluxDbSender",
    "Meter",
    "MetricFilter",
    "MetricRegistry",
    "PreviousValueTable",
    "ScheduledReporter",
    "SettableGauge",
    "TimeUnit",
    "Timer",
]
