"""Idle-metric suppression for counting metrics."""

import logging
from typing import Dict

from .models import MetricCategory, PreviousValueTable

logger = logging.getLogger(__name__)

# Only these categories go through suppression; gauges, counters and
# histograms are always reported.
SKIPPABLE_CATEGORIES = frozenset({MetricCategory.METER, MetricCategory.TIMER})


def calculate_delta(name: str, count: int, previous_values: PreviousValueTable) -> int:
    """Progress of a counting metric since it was last recorded.

    Returns:
        -1 when the metric has no recorded value yet, otherwise the increase
        in count. A decrease is reported as 0 and logged.
    """
    previous = previous_values.get(name)
    if previous is None:
        return -1
    if count < previous:
        logger.warning(f"Saw a non-monotonically increasing value for metric '{name}'")
        return 0
    return count - previous


def can_skip_metric(
    name: str,
    count: int,
    previous_values: PreviousValueTable,
    skip_idle_metrics: bool,
    updates: Dict[str, int],
) -> bool:
    """Decide whether a counting metric is idle and may be left out of this cycle.

    When suppression is enabled and the metric made progress, its count is
    written to ``updates`` for the caller to commit into the next table.
    """
    is_idle = calculate_delta(name, count, previous_values) == 0
    if skip_idle_metrics and not is_idle:
        updates[name] = count
    return skip_idle_metrics and is_idle
