"""Field extraction, one function per metric category."""

from typing import Any, Callable, Dict

from ..registry import Counter, Gauge, Histogram, Meter, Metric, Snapshot, Timer
from .models import MetricCategory


def _snapshot_fields(snapshot: Snapshot, convert: Callable[[float], float]) -> Dict[str, Any]:
    return {
        "min": convert(snapshot.get_min()),
        "max": convert(snapshot.get_max()),
        "mean": convert(snapshot.get_mean()),
        "stddev": convert(snapshot.get_std_dev()),
        "p50": convert(snapshot.get_median()),
        "p75": convert(snapshot.get_75th_percentile()),
        "p95": convert(snapshot.get_95th_percentile()),
        "p98": convert(snapshot.get_98th_percentile()),
        "p99": convert(snapshot.get_99th_percentile()),
        "p999": convert(snapshot.get_999th_percentile()),
    }


def _rate_fields(metered: Any, rate_factor: float) -> Dict[str, Any]:
    return {
        "m1_rate": metered.get_one_minute_rate() * rate_factor,
        "m5_rate": metered.get_five_minute_rate() * rate_factor,
        "m15_rate": metered.get_fifteen_minute_rate() * rate_factor,
        "mean_rate": metered.get_mean_rate() * rate_factor,
    }


def gauge_fields(gauge: Gauge, **_: float) -> Dict[str, Any]:
    return {"value": gauge.get_value()}


def counter_fields(counter: Counter, **_: float) -> Dict[str, Any]:
    return {"count": counter.get_count()}


def histogram_fields(histogram: Histogram, **_: float) -> Dict[str, Any]:
    """Histogram statistics in the raw value domain (no unit conversion)."""
    fields: Dict[str, Any] = {"count": histogram.get_count()}
    fields.update(_snapshot_fields(histogram.get_snapshot(), lambda value: value))
    return fields


def meter_fields(meter: Meter, rate_factor: float = 1.0, **_: float) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"count": meter.get_count()}
    fields.update(_rate_fields(meter, rate_factor))
    return fields


def timer_fields(
    timer: Timer, rate_factor: float = 1.0, duration_factor: float = 1.0, **_: float
) -> Dict[str, Any]:
    """Timer statistics: durations from nanoseconds to the duration unit, rates to the rate unit."""
    fields: Dict[str, Any] = {"count": timer.get_count()}
    fields.update(_snapshot_fields(timer.get_snapshot(), lambda value: value * duration_factor))
    fields.update(_rate_fields(timer, rate_factor))
    return fields


FIELD_EXTRACTORS: Dict[MetricCategory, Callable[..., Dict[str, Any]]] = {
    MetricCategory.GAUGE: gauge_fields,
    MetricCategory.COUNTER: counter_fields,
    MetricCategory.HISTOGRAM: histogram_fields,
    MetricCategory.METER: meter_fields,
    MetricCategory.TIMER: timer_fields,
}


def extract_fields(
    category: MetricCategory, metric: Metric, rate_factor: float, duration_factor: float
) -> Dict[str, Any]:
    return FIELD_EXTRACTORS[category](
        metric, rate_factor=rate_factor, duration_factor=duration_factor
    )
