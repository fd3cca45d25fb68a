"""Core simulation environment wrapper around SimPy."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import simpy
import simpy.rt

logger = logging.getLogger(__name__)


class SimulationEnvironment:
    """Wrapper around a SimPy environment that drives the dashboard clock.

    The environment is either a plain ``simpy.Environment`` (simulated time,
    advances instantly between events) or a ``simpy.rt.RealtimeEnvironment``
    that paces simulated seconds against the wall clock. In both modes the
    simulation time is anchored to the wall-clock time at construction so
    that samples carry a human-readable timestamp.
    """

    def __init__(self, config: Dict[str, Any], start_wall_time: Optional[datetime] = None) -> None:
        """Initialize the simulation environment.

        Args:
            config: Simulation-specific configuration containing:
                - max_simulation_time: Maximum duration for the run in simulated seconds
                - realtime (optional): Pace the clock against wall time (default False)
                - realtime_factor (optional): Wall-clock seconds per simulated second
            start_wall_time: Wall-clock time corresponding to simulation time 0.
                Defaults to ``datetime.now()``.
        """
        self.config: Dict[str, Any] = config
        self.realtime: bool = bool(config.get("realtime", False))

        if self.realtime:
            factor = config.get("realtime_factor", 1.0)
            if factor <= 0:
                raise ValueError(f"Invalid realtime_factor: {factor}. Must be positive")
            # strict=False: a slow tick delays the next one instead of raising
            self.env: simpy.Environment = simpy.rt.RealtimeEnvironment(factor=factor, strict=False)
        else:
            self.env = simpy.Environment()

        self.start_wall_time: datetime = start_wall_time or datetime.now()

        mode = "realtime" if self.realtime else "simulated"
        logger.info(f"SimulationEnvironment initialized ({mode} clock)")

    def schedule_process(self, process_generator_func: Callable, *args, **kwargs) -> simpy.Process:
        """Schedule a SimPy process (a generator function).

        Args:
            process_generator_func: A generator function that yields SimPy events
            *args: Positional arguments for the generator function
            **kwargs: Keyword arguments for the generator function

        Returns:
            The SimPy Process object
        """
        process = self.env.process(process_generator_func(*args, **kwargs))
        logger.debug(f"Scheduled process: {process_generator_func.__name__}")
        return process

    def run(self, until: Optional[float] = None) -> None:
        """Run the simulation.

        Runs until ``until`` (or ``max_simulation_time`` from the config) is
        reached or no more events are scheduled.

        Args:
            until: Absolute simulation time to stop at. Overrides the config.
        """
        if until is None:
            until = self.config.get("max_simulation_time", float("inf"))

        logger.info(f"Starting simulation (until: {until}s)")

        try:
            self.env.run(until=until)
            logger.info(f"Simulation completed successfully at time {self.env.now}")
        except Exception as e:
            logger.error(f"Error during simulation at time {self.env.now}: {e}")
            raise
        finally:
            logger.info(f"Simulation ended at time {self.env.now}")

    def now(self) -> float:
        """Get the current simulation time in seconds."""
        return self.env.now

    def wall_clock(self) -> datetime:
        """Get the wall-clock time corresponding to the current simulation time."""
        return self.start_wall_time + timedelta(seconds=self.env.now)

    def get_simpy_env(self) -> simpy.Environment:
        """Provide access to the raw SimPy environment.

        Returns:
            The SimPy Environment instance
        """
        return self.env
