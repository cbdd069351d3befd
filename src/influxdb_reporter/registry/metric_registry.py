"""Named collection of metrics and the filters used to select them."""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

from .metrics import (
    DEFAULT_CLOCK,
    Clock,
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    Timer,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Metric)


class MetricFilter:
    """Predicate over ``(name, metric)`` deciding whether a metric is reported."""

    def __init__(self, predicate: Callable[[str, Metric], bool], description: str = "custom"):
        self._predicate = predicate
        self.description = description

    def matches(self, name: str, metric: Metric) -> bool:
        return bool(self._predicate(name, metric))

    def __call__(self, name: str, metric: Metric) -> bool:
        return self.matches(name, metric)

    def __repr__(self) -> str:
        return f"MetricFilter({self.description})"

    @classmethod
    def starts_with(cls, prefix: str) -> "MetricFilter":
        return cls(lambda name, metric: name.startswith(prefix), f"starts_with={prefix!r}")

    @classmethod
    def contains(cls, text: str) -> "MetricFilter":
        return cls(lambda name, metric: text in name, f"contains={text!r}")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "MetricFilter":
        """Build a filter from a config mapping.

        Args:
            config: Mapping with any of:
                - prefix: only names starting with this prefix
                - include: explicit list of names to accept
                - exclude: list of names to reject (applied last)

        Returns:
            MetricFilter combining all given criteria, or ALL when empty
        """
        if not config:
            return cls.ALL

        prefix = config.get("prefix")
        include = set(config.get("include") or [])
        exclude = set(config.get("exclude") or [])

        def predicate(name: str, metric: Metric) -> bool:
            if name in exclude:
                return False
            if prefix is not None and not name.startswith(prefix):
                return False
            if include and name not in include:
                return False
            return True

        return cls(predicate, f"config={config!r}")


MetricFilter.ALL = MetricFilter(lambda name, metric: True, "all")


class MetricRegistry:
    """Registry of uniquely named metrics.

    Metrics are created on first access through the typed accessors and reused
    afterwards. A name always maps to exactly one metric of one type.
    """

    def __init__(self, clock: Clock = DEFAULT_CLOCK):
        self.clock = clock
        self._metrics: Dict[str, Metric] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: M) -> M:
        """Register a metric under a name.

        Raises:
            ValueError: If a metric with that name already exists
        """
        with self._lock:
            if name in self._metrics:
                raise ValueError(f"A metric named {name} already exists")
            self._metrics[name] = metric
        logger.debug(f"Registered {type(metric).__name__} {name}")
        return metric

    def remove(self, name: str) -> bool:
        with self._lock:
            removed = self._metrics.pop(name, None)
        return removed is not None

    def _get_or_add(self, name: str, metric_type: Type[M], factory: Callable[[], M]) -> M:
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                metric = factory()
                self._metrics[name] = metric
                return metric
        if not isinstance(existing, metric_type):
            raise ValueError(
                f"{name} is already used for a different type of metric "
                f"({type(existing).__name__}, requested {metric_type.__name__})"
            )
        return existing

    def counter(self, name: str) -> Counter:
        return self._get_or_add(name, Counter, Counter)

    def histogram(self, name: str) -> Histogram:
        return self._get_or_add(name, Histogram, Histogram)

    def meter(self, name: str) -> Meter:
        return self._get_or_add(name, Meter, lambda: Meter(self.clock))

    def timer(self, name: str) -> Timer:
        return self._get_or_add(name, Timer, lambda: Timer(self.clock))

    def gauge(self, name: str, value_fn: Callable[[], Any]) -> Gauge:
        return self._get_or_add(name, Gauge, lambda: Gauge(value_fn))

    def get_names(self) -> List[str]:
        with self._lock:
            return sorted(self._metrics)

    def get_metrics(self) -> Dict[str, Metric]:
        with self._lock:
            return dict(self._metrics)

    def _sorted_of_type(self, metric_type: Type[M], metric_filter: MetricFilter) -> Dict[str, M]:
        with self._lock:
            items: Iterable = list(self._metrics.items())
        return {
            name: metric
            for name, metric in sorted(items, key=lambda item: item[0])
            if isinstance(metric, metric_type) and metric_filter(name, metric)
        }

    def get_gauges(self, metric_filter: MetricFilter = MetricFilter.ALL) -> Dict[str, Gauge]:
        return self._sorted_of_type(Gauge, metric_filter)

    def get_counters(self, metric_filter: MetricFilter = MetricFilter.ALL) -> Dict[str, Counter]:
        return self._sorted_of_type(Counter, metric_filter)

    def get_histograms(self, metric_filter: MetricFilter = MetricFilter.ALL) -> Dict[str, Histogram]:
        return self._sorted_of_type(Histogram, metric_filter)

    def get_meters(self, metric_filter: MetricFilter = MetricFilter.ALL) -> Dict[str, Meter]:
        return self._sorted_of_type(Meter, metric_filter)

    def get_timers(self, metric_filter: MetricFilter = MetricFilter.ALL) -> Dict[str, Timer]:
        return self._sorted_of_type(Timer, metric_filter)
