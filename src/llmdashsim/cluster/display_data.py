"""Static cluster description shown next to the telemetry charts.

Nothing here is produced or consumed by the sampling loop; it is literal
display data for the applications panel and the topology diagram.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class ClusterInfo:
    title: str
    partitioning: str
    gpu_allocation: str
    model: str


@dataclass(frozen=True)
class Application:
    """A deployed serving application."""

    name: str
    status: str
    gpu: float  # Fractional GPU share
    memory: str
    uptime: str


@dataclass(frozen=True)
class Node:
    """A node in the topology diagram.

    Positions are percentages of the diagram width and height.
    """

    name: str
    role: str  # "head" or "worker"
    active: bool
    x_pct: float
    y_pct: float

    @property
    def status_label(self) -> str:
        return "Serving" if self.active else "Idle"


CLUSTER_INFO = ClusterInfo(
    title="vLLM Ray Cluster Dashboard",
    partitioning="Run:AI GPU Partitioning",
    gpu_allocation="2x 0.5 GPU",
    model="facebook/opt-125m",
)

APPLICATIONS: Tuple[Application, ...] = (
    Application(name="vllm-head", status="running", gpu=0.5, memory="8.2/16 GB", uptime="2h 15m"),
    Application(name="vllm-worker-1", status="running", gpu=0.5, memory="7.8/16 GB", uptime="2h 15m"),
)

NODES: Tuple[Node, ...] = (
    Node("vllm-head", "head", True, 50, 50),
    Node("worker-1", "worker", True, 25, 25),
    Node("worker-2", "worker", False, 75, 25),
    Node("worker-3", "worker", False, 25, 75),
    Node("worker-4", "worker", False, 75, 75),
    Node("worker-5", "worker", False, 50, 15),
    Node("worker-6", "worker", False, 50, 85),
    Node("worker-7", "worker", False, 10, 50),
    Node("worker-8", "worker", False, 90, 50),
)

# Links are drawn only between active nodes
LINKS: Tuple[Tuple[str, str], ...] = (
    ("worker-1", "vllm-head"),
)

LINK_LATENCY_MS = 12


def get_node(name: str) -> Node:
    """Look up a node by name."""
    for node in NODES:
        if node.name == name:
            return node
    raise KeyError(f"Unknown node: {name}")


def active_links() -> List[Tuple[Node, Node]]:
    """Resolve the link list to node pairs, skipping any link touching an idle node."""
    pairs = []
    for source, dest in LINKS:
        src_node, dst_node = get_node(source), get_node(dest)
        if src_node.active and dst_node.active:
            pairs.append((src_node, dst_node))
    return pairs


def topology_summary() -> Dict[str, int]:
    """Count nodes by state for the topology stats box."""
    serving = sum(1 for node in NODES if node.active)
    return {
        "total": len(NODES),
        "serving": serving,
        "idle": len(NODES) - serving,
        "latency_ms": LINK_LATENCY_MS,
    }
