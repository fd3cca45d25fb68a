"""Telemetry series storage and reporting module."""

from .models import (
    LATENCY,
    REQUESTS,
    SERIES_IDS,
    THROUGHPUT,
    LatencySample,
    RequestsSample,
    ThroughputSample,
    TickSamples,
)
from .plotting import plot_series
from .series_store import SeriesStore, UnknownSeriesError

__all__ = [
    "LATENCY",
    "THROUGHPUT",
    "REQUESTS",
    "SERIES_IDS",
    "LatencySample",
    "ThroughputSample",
    "RequestsSample",
    "TickSamples",
    "SeriesStore",
    "UnknownSeriesError",
    "plot_series",
]
