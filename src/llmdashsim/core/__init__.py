"""Core simulation engine module."""

from .simulation_environment import SimulationEnvironment

__all__ = ["SimulationEnvironment"]
