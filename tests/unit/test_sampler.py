"""
Unit tests for the telemetry sampler.
"""

from datetime import datetime

import pytest

from llmdashsim.workload.control_state import ControlSnapshot
from llmdashsim.workload.sampler import TelemetrySampler

WALL_TIME = datetime(2026, 1, 1, 12, 0, 5)


def idle(request_rate=10):
    return ControlSnapshot(request_rate=request_rate, batch_size=4, max_tokens=100, is_generating=False)


def generating(request_rate=10):
    return ControlSnapshot(request_rate=request_rate, batch_size=4, max_tokens=100, is_generating=True)


def sequence_source(values):
    """Uniform source that returns the given draws in order."""
    return iter(values).__next__


class TestDeterministicSampling:
    """Exact outputs with an injected uniform source."""

    def test_idle_midpoint(self):
        """With every draw at 0.5, idle samples sit at the middle of each range."""
        sampler = TelemetrySampler(uniform_source=lambda: 0.5)
        samples = sampler.sample(idle(), WALL_TIME, timestamp_sim=5.0)

        assert samples.latency.p50 == pytest.approx(65.0)
        assert samples.latency.p95 == pytest.approx(140.0)
        assert samples.latency.p99 == pytest.approx(205.0)
        assert samples.throughput.tokens == pytest.approx(125.0)
        assert samples.requests.requests == pytest.approx(1.0)

    def test_generating_midpoint(self):
        """While generating, throughput and requests move to the active ranges."""
        sampler = TelemetrySampler(uniform_source=lambda: 0.5)
        samples = sampler.sample(generating(request_rate=20), WALL_TIME)

        assert samples.throughput.tokens == pytest.approx(1000.0)
        assert samples.requests.requests == pytest.approx(22.5)

    def test_draw_order(self):
        """Draws are consumed as p50, p95, p99, tokens, requests."""
        sampler = TelemetrySampler(uniform_source=sequence_source([0.0, 0.1, 0.2, 0.3, 0.4]))
        samples = sampler.sample(idle(), WALL_TIME)

        assert samples.latency.p50 == pytest.approx(50.0)
        assert samples.latency.p95 == pytest.approx(124.0)
        assert samples.latency.p99 == pytest.approx(190.0)
        assert samples.throughput.tokens == pytest.approx(115.0)
        assert samples.requests.requests == pytest.approx(0.8)

    def test_five_draws_per_tick(self):
        """Each tick consumes exactly five draws."""
        calls = []

        def source():
            calls.append(1)
            return 0.25

        sampler = TelemetrySampler(uniform_source=source)
        sampler.sample(idle(), WALL_TIME)
        sampler.sample(generating(), WALL_TIME)
        assert len(calls) == 10

    def test_shared_timestamp(self):
        """All three samples carry the same label and simulation time."""
        sampler = TelemetrySampler(uniform_source=lambda: 0.5)
        samples = sampler.sample(idle(), WALL_TIME, timestamp_sim=5.0)

        label = WALL_TIME.strftime("%X")
        for sample in samples.by_series().values():
            assert sample.time == label
            assert sample.timestamp_sim == 5.0

    def test_batch_size_and_max_tokens_do_not_affect_output(self):
        """Only request_rate and is_generating feed the formulas."""
        a = TelemetrySampler(uniform_source=lambda: 0.3).sample(generating(), WALL_TIME)
        other = ControlSnapshot(request_rate=10, batch_size=32, max_tokens=500, is_generating=True)
        b = TelemetrySampler(uniform_source=lambda: 0.3).sample(other, WALL_TIME)
        assert a == b


class TestSampleRanges:
    """Range properties with the default random source."""

    @pytest.fixture
    def sampler(self):
        return TelemetrySampler(seed=1234)

    def test_latency_ranges_in_both_modes(self, sampler):
        """Latency percentiles stay in their ranges regardless of mode."""
        for control in (idle(), generating()):
            for _ in range(300):
                latency = sampler.sample(control, WALL_TIME).latency
                assert 50 <= latency.p50 < 80
                assert 120 <= latency.p95 < 160
                assert 180 <= latency.p99 < 230

    def test_idle_ranges(self, sampler):
        """Idle throughput lies in [100, 150) and requests in [0, 2)."""
        for _ in range(300):
            samples = sampler.sample(idle(request_rate=40), WALL_TIME)
            assert 100 <= samples.throughput.tokens < 150
            assert 0 <= samples.requests.requests < 2

    @pytest.mark.parametrize("request_rate", [1, 10, 50])
    def test_generating_ranges(self, sampler, request_rate):
        """Generating throughput lies in [800, 1200) and requests in [R, R+5)."""
        for _ in range(300):
            samples = sampler.sample(generating(request_rate=request_rate), WALL_TIME)
            assert 800 <= samples.throughput.tokens < 1200
            assert request_rate <= samples.requests.requests < request_rate + 5

    def test_same_seed_same_samples(self):
        """Seeded samplers are reproducible."""
        a = TelemetrySampler(seed=99).sample(generating(), WALL_TIME)
        b = TelemetrySampler(seed=99).sample(generating(), WALL_TIME)
        assert a == b
