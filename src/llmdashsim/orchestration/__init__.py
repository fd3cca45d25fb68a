"""Session orchestration module."""

from .dashboard_orchestrator import DashboardOrchestrator

__all__ = ["DashboardOrchestrator"]
