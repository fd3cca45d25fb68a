"""Operator-adjustable load parameters shared by the dashboard."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ControlListener = Callable[[str, Any, Any], None]


@dataclass(frozen=True)
class ParameterRange:
    """Inclusive integer range with a step, as exposed by a slider."""

    minimum: int
    maximum: int
    step: int = 1

    def clamp(self, value: Any) -> int:
        """Coerce ``value`` onto the range, snapping to the nearest step.

        Halfway values snap upwards, as a stepped range input does.

        Raises:
            ValueError: If ``value`` is not a number or is NaN
        """
        try:
            number = float(value)
        except TypeError:
            raise ValueError(f"Invalid value: {value!r} (not a number)") from None
        if math.isnan(number):
            raise ValueError(f"Invalid value: {value!r} (not a number)")
        number = min(self.maximum, max(self.minimum, number))
        steps = math.floor((number - self.minimum) / self.step + 0.5)
        return int(min(self.maximum, self.minimum + steps * self.step))


REQUEST_RATE_RANGE = ParameterRange(1, 50)
BATCH_SIZE_RANGE = ParameterRange(1, 32)
MAX_TOKENS_RANGE = ParameterRange(10, 500, step=10)

DEFAULT_REQUEST_RATE = 10
DEFAULT_BATCH_SIZE = 4
DEFAULT_MAX_TOKENS = 100


def _require_flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Invalid is_generating value: {value!r} (must be a bool)")
    return value


@dataclass(frozen=True)
class ControlSnapshot:
    """Immutable view of the control parameters, read once per tick."""

    request_rate: int
    batch_size: int
    max_tokens: int
    is_generating: bool


class ControlState:
    """Process-wide control parameters for the synthetic traffic generator.

    Every setter clamps its input to the documented range before storing it.
    Listeners are notified with ``(field, old_value, new_value)`` only when a
    stored value actually changes.
    """

    def __init__(
        self,
        request_rate: int = DEFAULT_REQUEST_RATE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        is_generating: bool = False,
    ):
        self._values: Dict[str, Any] = {
            "request_rate": REQUEST_RATE_RANGE.clamp(request_rate),
            "batch_size": BATCH_SIZE_RANGE.clamp(batch_size),
            "max_tokens": MAX_TOKENS_RANGE.clamp(max_tokens),
            "is_generating": _require_flag(is_generating),
        }
        self._listeners: List[ControlListener] = []

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ControlState":
        """Create a control state from a ``control`` configuration section."""
        return cls(
            request_rate=config.get("request_rate", DEFAULT_REQUEST_RATE),
            batch_size=config.get("batch_size", DEFAULT_BATCH_SIZE),
            max_tokens=config.get("max_tokens", DEFAULT_MAX_TOKENS),
            is_generating=config.get("is_generating", False),
        )

    @property
    def request_rate(self) -> int:
        return self._values["request_rate"]

    @property
    def batch_size(self) -> int:
        return self._values["batch_size"]

    @property
    def max_tokens(self) -> int:
        return self._values["max_tokens"]

    @property
    def is_generating(self) -> bool:
        return self._values["is_generating"]

    def set_request_rate(self, value: int) -> int:
        """Set the target request rate (req/sec), clamped to [1, 50]."""
        return self._store("request_rate", value, REQUEST_RATE_RANGE.clamp(value))

    def set_batch_size(self, value: int) -> int:
        """Set the batch size, clamped to [1, 32]."""
        return self._store("batch_size", value, BATCH_SIZE_RANGE.clamp(value))

    def set_max_tokens(self, value: int) -> int:
        """Set max tokens, clamped to [10, 500] in steps of 10."""
        return self._store("max_tokens", value, MAX_TOKENS_RANGE.clamp(value))

    def set_is_generating(self, value: bool) -> bool:
        """Switch the simulated traffic generator on or off.

        Raises:
            ValueError: If ``value`` is not a bool
        """
        return self._store("is_generating", value, _require_flag(value))

    def toggle_generating(self) -> bool:
        """Flip the traffic generator flag and return the new value."""
        return self.set_is_generating(not self.is_generating)

    def set(self, field: str, value: Any) -> Any:
        """Set a parameter by name, e.g. from a scripted control schedule."""
        setters = {
            "request_rate": self.set_request_rate,
            "batch_size": self.set_batch_size,
            "max_tokens": self.set_max_tokens,
            "is_generating": self.set_is_generating,
        }
        if field not in setters:
            raise ValueError(f"Unknown control parameter: {field}")
        return setters[field](value)

    def _store(self, field: str, requested: Any, value: Any) -> Any:
        if value != requested:
            logger.debug(f"Clamped {field}: requested {requested}, stored {value}")

        old_value = self._values[field]
        if old_value == value:
            return value

        self._values[field] = value
        logger.info(f"Control {field} changed: {old_value} -> {value}")
        for listener in list(self._listeners):
            listener(field, old_value, value)
        return value

    def snapshot(self) -> ControlSnapshot:
        """Return an immutable copy of the current parameters."""
        return ControlSnapshot(**self._values)

    def subscribe(self, listener: ControlListener) -> None:
        """Register a callback invoked as ``listener(field, old, new)`` on change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: ControlListener) -> None:
        """Remove a previously registered callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)
