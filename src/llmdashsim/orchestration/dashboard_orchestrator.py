"""Dashboard orchestrator for wiring and running the telemetry loop."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from ..core import SimulationEnvironment
from ..metrics import SeriesStore, plot_series
from ..utils.config_validator import DashboardConfig, DashboardConfigValidator
from ..workload import ControlState, TelemetrySampler, TickDriver
from ..workload.sampler import UniformSource

logger = logging.getLogger(__name__)


class DashboardOrchestrator:
    """Main entry point to set up and run a dashboard session."""

    def __init__(
        self,
        config_data: Dict[str, Any],
        uniform_source: Optional[UniformSource] = None,
        start_wall_time: Optional[datetime] = None,
    ):
        """Initialize the orchestrator with session configuration.

        Args:
            config_data: Complete dashboard configuration dictionary
            uniform_source: Optional random source handed to the sampler
            start_wall_time: Wall-clock time for simulation time 0

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config_data = config_data
        self.config: DashboardConfig = DashboardConfigValidator.parse(config_data)
        self._uniform_source = uniform_source
        self._start_wall_time = start_wall_time

        # Component instances (initialized in setup_simulation)
        self.sim_env_wrapper: Optional[SimulationEnvironment] = None
        self.control_state: Optional[ControlState] = None
        self.series_store: Optional[SeriesStore] = None
        self.sampler: Optional[TelemetrySampler] = None
        self.tick_driver: Optional[TickDriver] = None

        logger.info("DashboardOrchestrator initialized")

    def setup_simulation(self) -> None:
        """Initialize all session components."""
        logger.info("Setting up dashboard components...")

        sim_config = self.config.simulation.model_dump()
        self.sim_env_wrapper = SimulationEnvironment(sim_config, start_wall_time=self._start_wall_time)

        self.control_state = ControlState.from_config(self.config.control.model_dump())
        self.series_store = SeriesStore(capacity=self.config.series.capacity)
        self.sampler = TelemetrySampler(
            uniform_source=self._uniform_source, seed=self.config.simulation.random_seed
        )
        self.tick_driver = TickDriver(
            self.sim_env_wrapper,
            self.sampler,
            self.control_state,
            self.series_store,
            period_s=self.config.sampler.tick_period_s,
        )

        logger.info("Dashboard setup complete")

    def _control_schedule_process(self):
        """SimPy process applying scripted control changes at their times."""
        env = self.sim_env_wrapper.get_simpy_env()
        for change in sorted(self.config.control_schedule, key=lambda c: c.at):
            if change.at > env.now:
                yield env.timeout(change.at - env.now)
            for field, value in change.changes.as_changes().items():
                self.control_state.set(field, value)

    def add_tick_listener(self, listener: Callable) -> None:
        """Register a tick listener, setting up the session first if needed."""
        if self.tick_driver is None:
            self.setup_simulation()
        self.tick_driver.add_tick_listener(listener)

    def run(self, until: Optional[float] = None) -> Dict[str, Any]:
        """Run the dashboard session.

        Args:
            until: Simulation time to stop at; defaults to max_simulation_time

        Returns:
            Summary report dictionary
        """
        if self.sim_env_wrapper is None:
            self.setup_simulation()

        logger.info("=" * 60)
        logger.info("STARTING DASHBOARD SESSION")
        logger.info("=" * 60)

        self.tick_driver.start()
        if self.config.control_schedule:
            self.sim_env_wrapper.schedule_process(self._control_schedule_process)

        try:
            self.sim_env_wrapper.run(until=until)
        finally:
            self.tick_driver.stop()

        summary_report = self.generate_summary_report()
        self._write_outputs(summary_report)

        logger.info("=" * 60)
        logger.info("DASHBOARD SESSION COMPLETED")
        logger.info("=" * 60)

        return summary_report

    def generate_summary_report(self) -> Dict[str, Any]:
        """Summarize the current session state."""
        stats = self.series_store.generate_summary_report(
            self.config.metrics_config.percentiles_to_calculate
        )
        series = {
            series_id: {"samples": len(window), "fields": stats[series_id]}
            for series_id, window in self.series_store.snapshot().items()
        }

        summary = {
            "simulation": {
                "total_duration_s": self.sim_env_wrapper.now(),
                "tick_period_s": self.tick_driver.period_s,
                "ticks": self.tick_driver.tick_count,
                "realtime": self.sim_env_wrapper.realtime,
            },
            "control": self.control_state.as_dict(),
            "series": series,
        }

        logger.info(
            f"Session: {summary['simulation']['ticks']} ticks over "
            f"{summary['simulation']['total_duration_s']:.1f}s, window {len(self.series_store)} samples"
        )
        return summary

    def _write_outputs(self, summary_report: Dict[str, Any]) -> None:
        metrics_config = self.config.metrics_config

        if metrics_config.output_summary_json_path:
            summary_file = Path(metrics_config.output_summary_json_path)
            summary_file.parent.mkdir(parents=True, exist_ok=True)
            with open(summary_file, "w") as f:
                json.dump(summary_report, f, indent=2)
            logger.info(f"Saved summary report to {summary_file}")

        if metrics_config.output_series_csv_dir:
            csv_dir = Path(metrics_config.output_series_csv_dir)
            csv_dir.mkdir(parents=True, exist_ok=True)
            for series_id in self.series_store.snapshot():
                csv_file = csv_dir / f"{series_id}.csv"
                self.series_store.get_series_df(series_id).to_csv(csv_file, index=False)
                logger.info(f"Saved {series_id} series to {csv_file}")

        if metrics_config.output_plot_path:
            plot_series(self.series_store, metrics_config.output_plot_path)

    @classmethod
    def from_yaml_file(cls, config_path: str, **kwargs) -> "DashboardOrchestrator":
        """Create an orchestrator from a YAML configuration file."""
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)

        return cls(config_data, **kwargs)

    @classmethod
    def from_json_file(cls, config_path: str, **kwargs) -> "DashboardOrchestrator":
        """Create an orchestrator from a JSON configuration file."""
        with open(config_path, "r") as f:
            config_data = json.load(f)

        return cls(config_data, **kwargs)
