"""
Configuration validation for dashboard runs.

This module provides:
- Typed models for every configuration section
- Conversion of pydantic validation failures into readable messages
- Loading of YAML/JSON configuration files
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..workload.control_state import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REQUEST_RATE,
)

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""
    pass


class SimulationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_simulation_time: float = Field(..., gt=0, description="Run length in simulated seconds")
    random_seed: Optional[int] = None
    realtime: bool = False
    realtime_factor: float = Field(default=1.0, gt=0, description="Wall seconds per simulated second")


class SamplerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick_period_s: float = Field(default=1.0, gt=0)


class SeriesConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    capacity: int = Field(default=20, ge=1)


class ControlConfig(BaseModel):
    """Initial control values; out-of-range values are clamped when applied."""

    model_config = ConfigDict(extra="forbid")

    request_rate: int = DEFAULT_REQUEST_RATE
    batch_size: int = DEFAULT_BATCH_SIZE
    max_tokens: int = DEFAULT_MAX_TOKENS
    is_generating: bool = False


class ControlUpdate(BaseModel):
    """Partial control section; only the parameters given are applied.

    Values are coerced exactly like the initial ``control`` section.
    """

    model_config = ConfigDict(extra="forbid")

    request_rate: Optional[int] = None
    batch_size: Optional[int] = None
    max_tokens: Optional[int] = None
    is_generating: Optional[bool] = None

    @model_validator(mode="after")
    def _not_empty(self) -> "ControlUpdate":
        if not self.as_changes():
            raise ValueError("at least one control parameter must be set")
        return self

    def as_changes(self) -> Dict[str, Any]:
        """Return the parameters to apply, in field order."""
        return self.model_dump(exclude_none=True)


class ControlChange(BaseModel):
    """A scripted operator action applied at a given simulation time."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    at: float = Field(..., ge=0)
    changes: ControlUpdate = Field(..., alias="set")


class MetricsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    percentiles_to_calculate: List[float] = Field(default_factory=lambda: [0.5, 0.95, 0.99])
    output_summary_json_path: Optional[str] = None
    output_series_csv_dir: Optional[str] = None
    output_plot_path: Optional[str] = None

    @field_validator("percentiles_to_calculate")
    @classmethod
    def _fractions(cls, value: List[float]) -> List[float]:
        for p in value:
            if not 0 <= p <= 1:
                raise ValueError(f"percentile {p} must be a fraction in [0, 1]")
        return value


class DashboardConfig(BaseModel):
    """Complete configuration of a dashboard run."""

    model_config = ConfigDict(extra="forbid")

    simulation: SimulationConfig
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    series: SeriesConfig = Field(default_factory=SeriesConfig)
    control: ControlConfig = Field(default_factory=ControlConfig)
    control_schedule: List[ControlChange] = Field(default_factory=list)
    metrics_config: MetricsConfig = Field(default_factory=MetricsConfig)


def _format_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "<root>"
    return f"{location}: {error['msg']}"


class DashboardConfigValidator:
    """Validates complete dashboard configuration."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate a configuration dictionary.

        Returns:
            (is_valid, errors)
        """
        if not isinstance(config, dict):
            return False, ["Configuration must be a mapping"]

        try:
            parsed = DashboardConfig.model_validate(config)
        except ValidationError as e:
            return False, [_format_error(error) for error in e.errors()]

        errors = cls._validate_schedule(parsed)
        return len(errors) == 0, errors

    @classmethod
    def _validate_schedule(cls, config: DashboardConfig) -> List[str]:
        """Check that scripted changes fall inside the simulated run."""
        errors = []
        max_time = config.simulation.max_simulation_time
        for i, change in enumerate(config.control_schedule):
            if change.at > max_time:
                errors.append(
                    f"control_schedule.{i}.at: {change.at} is after max_simulation_time {max_time}"
                )
        return errors

    @classmethod
    def parse(cls, config: Dict[str, Any]) -> DashboardConfig:
        """Validate and return the typed configuration.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        is_valid, errors = cls.validate(config)
        if not is_valid:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")
        return DashboardConfig.model_validate(config)


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file, chosen by extension."""
    config_file = Path(config_path)

    with open(config_file) as f:
        if config_file.suffix in [".yaml", ".yml"]:
            return yaml.safe_load(f)
        return json.load(f)


def validate_config_file(config_path: str) -> Tuple[bool, List[str], Optional[Dict[str, Any]]]:
    """
    Load and validate a configuration file.

    Returns:
        (is_valid, errors, config)
    """
    config = load_config_file(config_path)

    is_valid, errors = DashboardConfigValidator.validate(config)

    if not is_valid:
        logger.warning(f"Configuration has {len(errors)} validation errors")
        for error in errors[:10]:
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    return is_valid, errors, config
