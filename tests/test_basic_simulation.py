"""Basic integration test for the dashboard session."""

from llmdashsim.orchestration import DashboardOrchestrator


def test_basic_session():
    """Test that a basic session can run end-to-end."""
    config = {
        "simulation": {
            "max_simulation_time": 10.5,
            "random_seed": 42,
        },
        "control": {
            "request_rate": 10,
            "is_generating": True,
        },
    }

    orchestrator = DashboardOrchestrator(config)
    summary = orchestrator.run()

    assert summary is not None
    assert "simulation" in summary
    assert "control" in summary
    assert "series" in summary

    assert summary["simulation"]["ticks"] == 10
    for series in summary["series"].values():
        assert series["samples"] == 10

    tokens = summary["series"]["throughput"]["fields"]["tokens"]
    assert 800 <= tokens["min"] <= tokens["max"] < 1200


if __name__ == "__main__":
    test_basic_session()
    print("Basic session test passed!")
