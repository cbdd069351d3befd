"""Sender collaborator contract and an in-memory implementation."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .models import InfluxDbPoint

logger = logging.getLogger(__name__)


class InfluxDbSender(ABC):
    """Interface the reporter writes points through.

    The sender owns common tags, buffering and transmission. The reporter
    calls ``set_tags`` once, then per cycle ``flush``, ``append_points`` for
    each metric, ``has_series_data`` and, if that returns True, ``write_data``.
    """

    @abstractmethod
    def set_tags(self, tags: Optional[Mapping[str, str]]) -> None:
        """Fix the tags applied to every point written from now on."""
        pass

    @abstractmethod
    def flush(self) -> None:
        """Drop any buffered points and prepare for a new batch."""
        pass

    @abstractmethod
    def append_points(self, point: InfluxDbPoint) -> None:
        """Buffer one point for the current batch."""
        pass

    @abstractmethod
    def has_series_data(self) -> bool:
        """Whether the current batch holds any points."""
        pass

    @abstractmethod
    def write_data(self) -> int:
        """Transmit the current batch.

        Returns:
            Number of points written
        """
        pass


class InMemoryInfluxDbSender(InfluxDbSender):
    """Sender that keeps every written batch in memory.

    Useful for tests and for inspecting what a reporter would transmit.
    """

    def __init__(self):
        self.tags: Dict[str, str] = {}
        self._buffer: List[InfluxDbPoint] = []
        self.batches: List[List[Dict[str, Any]]] = []

    def set_tags(self, tags: Optional[Mapping[str, str]]) -> None:
        self.tags = dict(tags) if tags else {}

    def flush(self) -> None:
        self._buffer = []

    def append_points(self, point: InfluxDbPoint) -> None:
        self._buffer.append(point)

    def has_series_data(self) -> bool:
        return bool(self._buffer)

    def write_data(self) -> int:
        batch = []
        for point in self._buffer:
            record = point.to_dict()
            if self.tags:
                record["tags"] = {**self.tags, **record.get("tags", {})}
            batch.append(record)
        self.batches.append(batch)
        self._buffer = []
        logger.debug(f"Wrote batch of {len(batch)} points")
        return len(batch)

    def buffered_points(self) -> List[InfluxDbPoint]:
        return list(self._buffer)

    def written_points(self) -> List[Dict[str, Any]]:
        return [point for batch in self.batches for point in batch]

    def to_dataframe(self) -> pd.DataFrame:
        """Get every written point as a pandas DataFrame, one row per point."""
        if not self.batches:
            return pd.DataFrame()

        rows = []
        for batch_index, batch in enumerate(self.batches):
            for point in batch:
                row = {
                    "batch": batch_index,
                    "measurement": point["measurement"],
                    "timestamp": int(point["timestamp"]),
                }
                for key, value in point.get("tags", {}).items():
                    row[f"tag_{key}"] = value
                row.update(point["fields"])
                rows.append(row)

        return pd.DataFrame(rows)
