"""Synthetic telemetry sampler for the dashboard."""

import logging
from datetime import datetime
from typing import Callable, Optional

import numpy as np

from ..metrics.models import LatencySample, RequestsSample, ThroughputSample, TickSamples
from .control_state import ControlSnapshot

logger = logging.getLogger(__name__)

# Zero-argument callable returning a float in [0, 1)
UniformSource = Callable[[], float]

TIME_LABEL_FORMAT = "%X"


class TelemetrySampler:
    """Produces one synthetic sample per series from the control parameters.

    The sampler keeps no state between ticks. All randomness comes from a
    uniform source so tests can substitute a fixed sequence of draws.
    """

    def __init__(self, uniform_source: Optional[UniformSource] = None, seed: Optional[int] = None):
        """Initialize the sampler.

        Args:
            uniform_source: Callable returning floats in [0, 1). When omitted a
                numpy Generator seeded with ``seed`` is used.
            seed: Random seed for the default source
        """
        if uniform_source is None:
            uniform_source = np.random.default_rng(seed).random
            if seed is not None:
                logger.info(f"Sampler seeded with {seed}")
        self._uniform = uniform_source

    def _draw(self, low: float, high: float) -> float:
        """Uniform draw in [low, high)."""
        return low + (high - low) * float(self._uniform())

    def sample(
        self,
        control: ControlSnapshot,
        wall_time: datetime,
        timestamp_sim: float = 0.0,
    ) -> TickSamples:
        """Synthesize the latency, throughput and request samples for one tick.

        Args:
            control: Control parameters read for this tick
            wall_time: Wall-clock time of the tick, rendered as the sample label
            timestamp_sim: Simulation time of the tick in seconds

        Returns:
            The three samples, all carrying the same timestamp
        """
        label = wall_time.strftime(TIME_LABEL_FORMAT)

        # Latency does not depend on the generator being active
        latency = LatencySample(
            time=label,
            timestamp_sim=timestamp_sim,
            p50=self._draw(50, 80),
            p95=self._draw(120, 160),
            p99=self._draw(180, 230),
        )

        if control.is_generating:
            tokens = self._draw(800, 1200)
            requests = self._draw(control.request_rate, control.request_rate + 5)
        else:
            tokens = self._draw(100, 150)
            requests = self._draw(0, 2)

        logger.debug(
            f"Sampled at {label}: p50={latency.p50:.1f}ms, tokens={tokens:.1f}/s, "
            f"requests={requests:.2f}/s"
        )

        return TickSamples(
            latency=latency,
            throughput=ThroughputSample(time=label, timestamp_sim=timestamp_sim, tokens=tokens),
            requests=RequestsSample(time=label, timestamp_sim=timestamp_sim, requests=requests),
        )
