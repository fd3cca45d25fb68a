"""Periodic driver that samples telemetry into the series store."""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

import simpy

from ..core import SimulationEnvironment
from ..metrics.models import TickSamples
from ..metrics.series_store import SeriesStore
from .control_state import ControlState
from .sampler import TelemetrySampler

logger = logging.getLogger(__name__)

DEFAULT_TICK_PERIOD_S = 1.0

# Control fields whose change restarts the tick clock
REARM_FIELDS = ("request_rate", "is_generating")

TickListener = Callable[[int, TickSamples], None]


class DriverState(str, Enum):
    STOPPED = "Stopped"
    RUNNING = "Running"


class TickDriver:
    """Runs the sampling loop as a SimPy process.

    Each armed loop carries a generation number. Stopping or re-arming bumps
    the generation, so a loop that wakes up after being superseded exits
    without sampling.
    """

    def __init__(
        self,
        sim_env: SimulationEnvironment,
        sampler: TelemetrySampler,
        control_state: ControlState,
        series_store: SeriesStore,
        period_s: float = DEFAULT_TICK_PERIOD_S,
    ):
        """Initialize the tick driver.

        Args:
            sim_env: Simulation environment providing the clock
            sampler: Sampler invoked once per tick
            control_state: Control parameters read at every tick
            series_store: Store receiving the produced samples
            period_s: Tick period in simulated seconds
        """
        if period_s <= 0:
            raise ValueError(f"Invalid tick period: {period_s} (must be positive)")

        self.sim_env = sim_env
        self.sampler = sampler
        self.control_state = control_state
        self.series_store = series_store
        self.period_s = period_s

        self.state = DriverState.STOPPED
        self.tick_count = 0
        self._generation = 0
        self._process: Optional[simpy.Process] = None
        self._tick_listeners: List[TickListener] = []

        control_state.subscribe(self._on_control_change)

    @property
    def is_running(self) -> bool:
        return self.state is DriverState.RUNNING

    def start(self) -> None:
        """Transition Stopped -> Running and arm the periodic clock."""
        if self.is_running:
            logger.debug("TickDriver already running")
            return

        self.state = DriverState.RUNNING
        self._arm()
        logger.info(f"TickDriver started (period: {self.period_s}s)")

    def stop(self) -> None:
        """Transition Running -> Stopped; no further ticks are produced."""
        if not self.is_running:
            return

        self.state = DriverState.STOPPED
        self._cancel()
        logger.info(f"TickDriver stopped after {self.tick_count} ticks")

    def rearm(self) -> None:
        """Restart the periodic clock so the next tick is one full period away."""
        if not self.is_running:
            return

        self._cancel()
        self._arm()
        logger.debug(f"TickDriver re-armed at time {self.sim_env.now()}")

    def add_tick_listener(self, listener: TickListener) -> None:
        """Register a callback invoked as ``listener(tick_number, samples)``."""
        self._tick_listeners.append(listener)

    def _arm(self) -> None:
        self._generation += 1
        self._process = self.sim_env.schedule_process(self._tick_loop, self._generation)

    def _cancel(self) -> None:
        self._generation += 1
        process, self._process = self._process, None
        if process is None or not process.is_alive:
            return

        env = self.sim_env.get_simpy_env()
        # A process cannot interrupt itself, and one that has not started yet
        # cannot catch the interrupt; the generation check retires both.
        if process is env.active_process or isinstance(process.target, simpy.events.Initialize):
            return
        process.interrupt("cancelled")

    def _on_control_change(self, field: str, old_value: Any, new_value: Any) -> None:
        if field in REARM_FIELDS:
            self.rearm()

    def _tick_loop(self, generation: int):
        """SimPy process firing one tick per period until superseded."""
        env = self.sim_env.get_simpy_env()
        try:
            while True:
                yield env.timeout(self.period_s)
                if generation != self._generation:
                    return
                self.tick()
        except simpy.Interrupt:
            logger.debug(f"Tick loop generation {generation} cancelled")

    def tick(self) -> TickSamples:
        """Sample every series once and append the results to the store.

        Reading the control state, sampling and appending run as one step on
        the simulation thread, so a control change cannot land mid-tick.
        """
        control = self.control_state.snapshot()
        samples = self.sampler.sample(
            control, self.sim_env.wall_clock(), timestamp_sim=self.sim_env.now()
        )
        for series_id, sample in samples.by_series().items():
            self.series_store.append(series_id, sample)

        self.tick_count += 1
        for listener in list(self._tick_listeners):
            listener(self.tick_count, samples)
        return samples
