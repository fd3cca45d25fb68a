"""
Unit tests for the simulation clock, in simulated and realtime modes.
"""

import random
import time
from datetime import datetime, timedelta

import numpy as np
import pytest
import simpy.rt

from llmdashsim.core import SimulationEnvironment
from llmdashsim.metrics.models import SERIES_IDS, THROUGHPUT
from llmdashsim.metrics.series_store import SeriesStore
from llmdashsim.workload import ControlState, TelemetrySampler, TickDriver

START = datetime(2026, 1, 1, 8, 0, 0)


def build_driver(sim_env, store):
    return TickDriver(sim_env, TelemetrySampler(seed=3), ControlState(), store, period_s=1.0)


class TestSimulatedClock:
    """Test the default simulated clock."""

    def test_defaults_to_simulated(self):
        """Without realtime the plain SimPy environment is used."""
        sim_env = SimulationEnvironment({"max_simulation_time": 10})
        assert not sim_env.realtime
        assert not isinstance(sim_env.get_simpy_env(), simpy.rt.RealtimeEnvironment)

    def test_run_defaults_to_max_simulation_time(self):
        """run() without arguments stops at max_simulation_time."""
        sim_env = SimulationEnvironment({"max_simulation_time": 7.5})
        sim_env.run()
        assert sim_env.now() == 7.5

    def test_wall_clock_follows_simulation_time(self):
        """Wall-clock time is the start time plus elapsed simulated seconds."""
        sim_env = SimulationEnvironment({"max_simulation_time": 10}, start_wall_time=START)
        sim_env.run(until=4)
        assert sim_env.wall_clock() == START + timedelta(seconds=4)

    def test_seed_leaves_global_generators_alone(self):
        """Seeding a session only affects its own sampler."""
        random.seed(0)
        np.random.seed(0)
        expected = (random.random(), np.random.random())

        random.seed(0)
        np.random.seed(0)
        SimulationEnvironment({"max_simulation_time": 10, "random_seed": 123})
        TelemetrySampler(seed=123)
        assert (random.random(), np.random.random()) == expected

    def test_seeded_samplers_repeat(self):
        """Two samplers with the same seed draw the same telemetry."""
        control = ControlState().snapshot()
        first = TelemetrySampler(seed=123).sample(control, START)
        second = TelemetrySampler(seed=123).sample(control, START)
        assert first == second


class TestRealtimeClock:
    """Test pacing against the wall clock."""

    def test_realtime_ticks(self):
        """A scaled realtime clock produces ticks with increasing timestamps."""
        began = time.monotonic()
        sim_env = SimulationEnvironment(
            {"max_simulation_time": 10, "realtime": True, "realtime_factor": 0.01},
            start_wall_time=START,
        )
        assert sim_env.realtime
        assert isinstance(sim_env.get_simpy_env(), simpy.rt.RealtimeEnvironment)

        store = SeriesStore()
        driver = build_driver(sim_env, store)
        driver.start()

        sim_env.run(until=5.5)
        elapsed = time.monotonic() - began

        assert driver.tick_count == 5
        assert elapsed >= 0.05
        for series_id in SERIES_IDS:
            stamps = [s.timestamp_sim for s in store.get_series(series_id)]
            assert stamps == [1.0, 2.0, 3.0, 4.0, 5.0]

        labels = [s.time for s in store.get_series(THROUGHPUT)]
        assert labels == [(START + timedelta(seconds=n)).strftime("%X") for n in range(1, 6)]

    def test_realtime_control_change(self):
        """Re-arming works the same way on the realtime clock."""
        sim_env = SimulationEnvironment(
            {"max_simulation_time": 10, "realtime": True, "realtime_factor": 0.01}
        )
        store = SeriesStore()
        control_state = ControlState()
        driver = TickDriver(sim_env, TelemetrySampler(seed=3), control_state, store)
        driver.start()

        sim_env.run(until=2.5)
        control_state.set_is_generating(True)
        sim_env.run(until=5)

        stamps = [s.timestamp_sim for s in store.get_series(THROUGHPUT)]
        assert stamps == [1.0, 2.0, 3.5, 4.5]
        assert all(a < b for a, b in zip(stamps, stamps[1:]))

    @pytest.mark.parametrize("factor", [0, -1, -0.5])
    def test_invalid_realtime_factor(self, factor):
        """realtime_factor must be positive."""
        with pytest.raises(ValueError):
            SimulationEnvironment(
                {"max_simulation_time": 10, "realtime": True, "realtime_factor": factor}
            )

    def test_factor_ignored_when_simulated(self):
        """The factor is only checked when the realtime clock is requested."""
        sim_env = SimulationEnvironment({"max_simulation_time": 10, "realtime_factor": 0})
        assert not sim_env.realtime
