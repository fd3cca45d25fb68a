"""Synthetic load control and sampling module."""

from .control_state import ControlSnapshot, ControlState
from .sampler import TelemetrySampler
from .tick_driver import DriverState, TickDriver

__all__ = ["ControlState", "ControlSnapshot", "TelemetrySampler", "TickDriver", "DriverState"]
