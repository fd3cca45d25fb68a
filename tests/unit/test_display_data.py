"""
Unit tests for the static cluster display data.
"""

import pytest

from llmdashsim.cluster import APPLICATIONS, NODES, active_links, topology_summary
from llmdashsim.cluster.display_data import get_node


def test_applications():
    """Both serving applications are listed with half a GPU each."""
    assert [app.name for app in APPLICATIONS] == ["vllm-head", "vllm-worker-1"]
    assert all(app.status == "running" for app in APPLICATIONS)
    assert sum(app.gpu for app in APPLICATIONS) == pytest.approx(1.0)


def test_topology_summary_matches_nodes():
    """Counts are derived from the node list."""
    summary = topology_summary()
    assert summary["total"] == len(NODES) == 9
    assert summary["serving"] == 2
    assert summary["idle"] == 7
    assert summary["latency_ms"] == 12


def test_active_links_connect_serving_nodes():
    """Links are only drawn between active nodes."""
    links = active_links()
    assert [(a.name, b.name) for a, b in links] == [("worker-1", "vllm-head")]
    assert all(a.active and b.active for a, b in links)


def test_node_lookup():
    """Nodes can be looked up by name."""
    head = get_node("vllm-head")
    assert head.role == "head"
    assert head.status_label == "Serving"
    assert (head.x_pct, head.y_pct) == (50, 50)
    assert get_node("worker-5").status_label == "Idle"

    with pytest.raises(KeyError):
        get_node("worker-9")
