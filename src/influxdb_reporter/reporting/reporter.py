"""Reporter turning registry metrics into InfluxDB points."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..registry import (
    Clock,
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    MetricFilter,
    MetricRegistry,
    Timer,
)
from ..utils.config_validator import ConfigurationError, ReporterConfigValidator
from ..utils.units import TimeUnit
from .fields import extract_fields
from .idle import SKIPPABLE_CATEGORIES, can_skip_metric
from .models import InfluxDbPoint, MetricCategory, PreviousValueTable
from .sender import InfluxDbSender

logger = logging.getLogger(__name__)


def as_metric_filter(metric_filter: Optional[Callable[[str, Metric], bool]]) -> MetricFilter:
    """Wrap a plain (name, metric) predicate; None selects every metric."""
    if metric_filter is None:
        return MetricFilter.ALL
    if isinstance(metric_filter, MetricFilter):
        return metric_filter
    return MetricFilter(metric_filter)


@dataclass
class ReporterSettings:
    """Options fixed when a reporter is built."""

    tags: Dict[str, str] = field(default_factory=dict)
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    metric_filter: MetricFilter = MetricFilter.ALL
    skip_idle_metrics: bool = False

    @property
    def rate_factor(self) -> float:
        return self.rate_unit.rate_factor()

    @property
    def duration_factor(self) -> float:
        return self.duration_unit.duration_factor()


def collect_points(
    gauges: Mapping[str, Gauge],
    counters: Mapping[str, Counter],
    histograms: Mapping[str, Histogram],
    meters: Mapping[str, Meter],
    timers: Mapping[str, Timer],
    settings: ReporterSettings,
    previous_values: PreviousValueTable,
    now_ms: int,
) -> Tuple[List[InfluxDbPoint], PreviousValueTable]:
    """Build the points for one report cycle.

    Categories are processed in the order gauge, counter, histogram, meter,
    timer; within a category metrics are visited in name order. Each metric
    that passes the filter and is not idle yields exactly one point.

    Args:
        gauges, counters, histograms, meters, timers: Metrics by name
        settings: Reporter options
        previous_values: Counts recorded by earlier cycles
        now_ms: Timestamp for every point, in epoch milliseconds

    Returns:
        (points, next previous-value table). ``previous_values`` is not modified.
    """
    by_category: Dict[MetricCategory, Mapping[str, Metric]] = {
        MetricCategory.GAUGE: gauges,
        MetricCategory.COUNTER: counters,
        MetricCategory.HISTOGRAM: histograms,
        MetricCategory.METER: meters,
        MetricCategory.TIMER: timers,
    }
    timestamp = str(now_ms)
    rate_factor = settings.rate_factor
    duration_factor = settings.duration_factor

    points: List[InfluxDbPoint] = []
    updates: Dict[str, int] = {}

    for category in MetricCategory:
        metrics = by_category[category] or {}
        for name in sorted(metrics):
            metric = metrics[name]
            if not settings.metric_filter.matches(name, metric):
                continue
            if category in SKIPPABLE_CATEGORIES and can_skip_metric(
                name,
                metric.get_count(),
                previous_values,
                settings.skip_idle_metrics,
                updates,
            ):
                logger.debug(f"Skipping idle {category.value} {name}")
                continue
            fields = extract_fields(category, metric, rate_factor, duration_factor)
            points.append(InfluxDbPoint(name, None, timestamp, fields))

    return points, previous_values.with_updates(updates)


class InfluxDbReporter:
    """Periodically invoked reporter writing a registry's metrics to an InfluxDB sender.

    Each call to ``report`` is one cycle: flush the sender, append one point
    per metric, then write if anything was appended. A failing cycle is logged
    and discarded; it never raises to the caller.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        sender: InfluxDbSender,
        tags: Optional[Mapping[str, str]] = None,
        rate_unit: TimeUnit = TimeUnit.SECONDS,
        duration_unit: TimeUnit = TimeUnit.MILLISECONDS,
        metric_filter: Optional[Callable[[str, Metric], bool]] = None,
        skip_idle_metrics: bool = False,
        clock: Optional[Clock] = None,
    ):
        """Initialize the reporter.

        Args:
            registry: Registry whose metrics ``report_now`` reads
            sender: Collaborator that buffers and transmits points
            tags: Tags applied to every point, handed to the sender once
            rate_unit: Unit rates are expressed per (default: seconds)
            duration_unit: Unit durations are expressed in (default: milliseconds)
            metric_filter: Selects which metrics take part in a cycle (default: all)
            skip_idle_metrics: Leave out meters and timers whose count has not advanced
            clock: Source of report timestamps (default: the registry's clock)
        """
        self.registry = registry
        self.sender = sender
        self.settings = ReporterSettings(
            tags=dict(tags) if tags else {},
            rate_unit=TimeUnit.parse(rate_unit),
            duration_unit=TimeUnit.parse(duration_unit),
            metric_filter=as_metric_filter(metric_filter),
            skip_idle_metrics=skip_idle_metrics,
        )
        self.clock = clock or registry.clock
        self.previous_values = PreviousValueTable()
        self._cycle_lock = threading.Lock()

        self.sender.set_tags(self.settings.tags or None)

        logger.info(
            f"InfluxDbReporter initialized (rates per {self.settings.rate_unit.name.lower()}, "
            f"durations in {self.settings.duration_unit.name.lower()}, "
            f"skip_idle_metrics={skip_idle_metrics})"
        )

    @classmethod
    def for_registry(cls, registry: MetricRegistry) -> "Builder":
        return Builder(registry)

    @classmethod
    def from_config(
        cls, registry: MetricRegistry, sender: InfluxDbSender, config: Dict[str, Any]
    ) -> "InfluxDbReporter":
        """Create a reporter from a ``reporter`` configuration section.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config = dict(config or {})
        errors = ReporterConfigValidator.validate(config)
        if errors:
            raise ConfigurationError("; ".join(errors))

        return cls(
            registry,
            sender,
            tags=config["tags"],
            rate_unit=TimeUnit.parse(config["rate_unit"]),
            duration_unit=TimeUnit.parse(config["duration_unit"]),
            metric_filter=MetricFilter.from_config(config["filter"]),
            skip_idle_metrics=config["skip_idle_metrics"],
        )

    def report_now(self) -> None:
        """Run one cycle over the registry's current metrics.

        The filter is applied inside the cycle, so a failing filter is
        handled like any other cycle failure.
        """
        self.report(
            self.registry.get_gauges(),
            self.registry.get_counters(),
            self.registry.get_histograms(),
            self.registry.get_meters(),
            self.registry.get_timers(),
        )

    def report(
        self,
        gauges: Mapping[str, Gauge],
        counters: Mapping[str, Counter],
        histograms: Mapping[str, Histogram],
        meters: Mapping[str, Meter],
        timers: Mapping[str, Timer],
        now: Optional[int] = None,
    ) -> None:
        """Report the given metrics as one cycle.

        Args:
            gauges, counters, histograms, meters, timers: Metrics by name
            now: Timestamp in epoch milliseconds (default: the clock's time)
        """
        with self._cycle_lock:
            try:
                now_ms = self.clock.time() if now is None else now
                self.sender.flush()

                points, next_values = collect_points(
                    gauges,
                    counters,
                    histograms,
                    meters,
                    timers,
                    self.settings,
                    self.previous_values,
                    now_ms,
                )
                for point in points:
                    self.sender.append_points(point)

                if self.sender.has_series_data():
                    self.sender.write_data()

                self.previous_values = next_values
                logger.debug(f"Reported {len(points)} points at {now_ms}")
            except Exception:
                logger.warning("Unable to report to InfluxDB. Discarding data.", exc_info=True)


class Builder:
    """Fluent construction of an InfluxDbReporter."""

    def __init__(self, registry: MetricRegistry):
        self.registry = registry
        self._tags: Optional[Dict[str, str]] = None
        self._rate_unit = TimeUnit.SECONDS
        self._duration_unit = TimeUnit.MILLISECONDS
        self._filter = MetricFilter.ALL
        self._skip_idle_metrics = False
        self._clock: Optional[Clock] = None

    def with_tags(self, tags: Mapping[str, str]) -> "Builder":
        self._tags = dict(tags)
        return self

    def convert_rates_to(self, rate_unit: TimeUnit) -> "Builder":
        self._rate_unit = TimeUnit.parse(rate_unit)
        return self

    def convert_durations_to(self, duration_unit: TimeUnit) -> "Builder":
        self._duration_unit = TimeUnit.parse(duration_unit)
        return self

    def filter(self, metric_filter: Callable[[str, Metric], bool]) -> "Builder":
        self._filter = as_metric_filter(metric_filter)
        return self

    def skip_idle_metrics(self, skip_idle_metrics: bool) -> "Builder":
        self._skip_idle_metrics = skip_idle_metrics
        return self

    def with_clock(self, clock: Clock) -> "Builder":
        self._clock = clock
        return self

    def build(self, sender: InfluxDbSender) -> InfluxDbReporter:
        return InfluxDbReporter(
            self.registry,
            sender,
            tags=self._tags,
            rate_unit=self._rate_unit,
            duration_unit=self._duration_unit,
            metric_filter=self._filter,
            skip_idle_metrics=self._skip_idle_metrics,
            clock=self._clock,
        )
