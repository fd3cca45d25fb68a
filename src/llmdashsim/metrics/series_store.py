"""Bounded time-series storage for dashboard telemetry."""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .models import SAMPLE_TYPES, SERIES_IDS, VALUE_FIELDS, Sample

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20

SeriesListener = Callable[[str, Tuple[Sample, ...]], None]


class UnknownSeriesError(ValueError):
    """Raised when a series id is not one of the tracked series."""
    pass


class SeriesStore:
    """Holds one sliding window of samples per metric series.

    Each series is a FIFO buffer of at most ``capacity`` samples. Appending to
    a full series evicts its oldest sample. Readers only ever receive tuples,
    so a snapshot handed to the presentation layer never changes under it.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Initialize the store.

        Args:
            capacity: Maximum number of samples retained per series
        """
        if capacity < 1:
            raise ValueError(f"Invalid series capacity: {capacity} (must be >= 1)")

        self.capacity = capacity
        self._series: Dict[str, Deque[Sample]] = {
            series_id: deque(maxlen=capacity) for series_id in SERIES_IDS
        }
        self._listeners: List[SeriesListener] = []

        logger.info(f"SeriesStore initialized with capacity {capacity}")

    def _get(self, series_id: str) -> Deque[Sample]:
        try:
            return self._series[series_id]
        except KeyError:
            raise UnknownSeriesError(
                f"Unknown series id: {series_id!r} (expected one of {', '.join(SERIES_IDS)})"
            ) from None

    def append(self, series_id: str, sample: Sample) -> Tuple[Sample, ...]:
        """Append a sample to a series, evicting the oldest one if full.

        Args:
            series_id: One of ``latency``, ``throughput``, ``requests``
            sample: Sample to append

        Returns:
            The updated series as an immutable snapshot

        Raises:
            UnknownSeriesError: If ``series_id`` is not a tracked series
            ValueError: If ``sample`` is not the sample type of ``series_id``
        """
        series = self._get(series_id)
        expected = SAMPLE_TYPES[series_id]
        if not isinstance(sample, expected):
            raise ValueError(
                f"Cannot append {type(sample).__name__} to {series_id!r} (expected {expected.__name__})"
            )
        if len(series) == self.capacity:
            logger.debug(f"Evicting oldest {series_id} sample at {series[0].time}")
        series.append(sample)

        snapshot = tuple(series)
        for listener in list(self._listeners):
            listener(series_id, snapshot)
        return snapshot

    def get_series(self, series_id: str) -> Tuple[Sample, ...]:
        """Return the current window of a series, oldest first."""
        return tuple(self._get(series_id))

    def snapshot(self) -> Dict[str, Tuple[Sample, ...]]:
        """Return the current window of every series."""
        return {series_id: tuple(series) for series_id, series in self._series.items()}

    def __len__(self) -> int:
        # Series advance together, so any one of them gives the window length
        return max(len(series) for series in self._series.values())

    def clear(self) -> None:
        """Drop every retained sample."""
        for series in self._series.values():
            series.clear()

    def subscribe(self, listener: SeriesListener) -> None:
        """Register a callback invoked with ``(series_id, snapshot)`` after each append."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SeriesListener) -> None:
        """Remove a previously registered callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def get_series_df(self, series_id: str) -> pd.DataFrame:
        """Get a series window as a pandas DataFrame."""
        series = self._get(series_id)
        if not series:
            return pd.DataFrame()
        return pd.DataFrame([sample.as_dict() for sample in series])

    def generate_summary_report(
        self, percentiles: Optional[List[float]] = None
    ) -> Dict[str, Dict[str, Dict[str, float]]]:
        """Summarize the samples currently held in each window.

        Args:
            percentiles: Percentiles to calculate as fractions (e.g. [0.5, 0.99])

        Returns:
            Mapping of series id -> value field -> statistics
        """
        if percentiles is None:
            percentiles = [0.5, 0.95, 0.99]

        report = {}
        for series_id, series in self._series.items():
            report[series_id] = {
                field: self._calculate_stats([getattr(s, field) for s in series], percentiles)
                for field in VALUE_FIELDS[series_id]
            }
        return report

    def _calculate_stats(self, values: List[float], percentiles: List[float]) -> Dict[str, Any]:
        """Calculate statistics for a list of values."""
        if not values:
            return {"count": 0}

        stats = {
            "count": len(values),
            "mean": float(np.mean(values)),
            "std": float(np.std(values)),
            "min": float(np.min(values)),
            "max": float(np.max(values)),
        }

        for p in percentiles:
            stats[f"p{int(round(p * 100))}"] = float(np.percentile(values, p * 100))

        return stats
