"""Static cluster display data module."""

from .display_data import (
    APPLICATIONS,
    CLUSTER_INFO,
    NODES,
    Application,
    Node,
    active_links,
    topology_summary,
)

__all__ = [
    "APPLICATIONS",
    "CLUSTER_INFO",
    "NODES",
    "Application",
    "Node",
    "active_links",
    "topology_summary",
]
