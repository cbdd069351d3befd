"""Reporting of registry metrics to an InfluxDB sender."""

from .models import InfluxDbPoint, MetricCategory, PreviousValueTable
from .reporter import Builder, InfluxDbReporter, ReporterSettings, collect_points
from .sender import InfluxDbSender, InMemoryInfluxDbSender

__all__ = [
    "Builder",
    "InfluxDbPoint",
    "InfluxDbReporter",
    "InfluxDbSender",
    "InMemoryInfluxDbSender",
    "MetricCategory",
    "PreviousValueTable",
    "ReporterSettings",
    "collect_points",
]
