"""Data models for telemetry series."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

LATENCY = "latency"
THROUGHPUT = "throughput"
REQUESTS = "requests"

# Append order used by the tick driver
SERIES_IDS = (LATENCY, THROUGHPUT, REQUESTS)

# Numeric fields carried by each series
VALUE_FIELDS = {
    LATENCY: ("p50", "p95", "p99"),
    THROUGHPUT: ("tokens",),
    REQUESTS: ("requests",),
}


@dataclass(frozen=True)
class LatencySample:
    """Latency percentiles (ms) for one tick."""

    time: str  # Locale time label, e.g. "14:03:27"
    timestamp_sim: float
    p50: float
    p95: float
    p99: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ThroughputSample:
    """Token throughput (tokens/sec) for one tick."""

    time: str
    timestamp_sim: float
    tokens: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RequestsSample:
    """Request rate (req/sec) for one tick."""

    time: str
    timestamp_sim: float
    requests: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


Sample = Union[LatencySample, ThroughputSample, RequestsSample]

SAMPLE_TYPES = {
    LATENCY: LatencySample,
    THROUGHPUT: ThroughputSample,
    REQUESTS: RequestsSample,
}


@dataclass(frozen=True)
class TickSamples:
    """The three samples produced by a single tick, sharing one timestamp."""

    latency: LatencySample
    throughput: ThroughputSample
    requests: RequestsSample

    def by_series(self) -> Dict[str, Sample]:
        """Map each series id to its sample, in append order."""
        return {
            LATENCY: self.latency,
            THROUGHPUT: self.throughput,
            REQUESTS: self.requests,
        }
