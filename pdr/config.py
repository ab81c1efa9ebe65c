"""
Configuration for the pedestrian dead reckoning engine.
"""

import json
import logging
import math
import numbers
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .math.constants import (
    ACCEL_LOW_PASS_ALPHA,
    EARTH_RADIUS_M,
    HEADING_WINDOW_SIZE,
    INITIAL_HEADING_DELAY_S,
    INITIAL_POSITION_UNCERTAINTY,
    MIN_COS_LATITUDE,
    POSITION_MEASUREMENT_NOISE,
    POSITION_PROCESS_NOISE,
    STEP_DETECTION_THRESHOLD,
    STEP_DISTANCE_M,
    STEP_REFRACTORY_PERIOD_S,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PDRConfig:
    """Tuning parameters, fixed when the engine is constructed."""

    # Signal smoothing
    alpha: float = ACCEL_LOW_PASS_ALPHA
    window_size: int = HEADING_WINDOW_SIZE

    # Step detection
    step_detection_threshold: float = STEP_DETECTION_THRESHOLD
    refractory_period_sec: float = STEP_REFRACTORY_PERIOD_S

    # Displacement
    step_distance_meters: float = STEP_DISTANCE_M
    earth_radius_meters: float = EARTH_RADIUS_M
    min_cos_latitude: float = MIN_COS_LATITUDE

    # Position filter
    process_noise: float = POSITION_PROCESS_NOISE
    measurement_noise: float = POSITION_MEASUREMENT_NOISE
    initial_uncertainty: float = INITIAL_POSITION_UNCERTAINTY

    # Heading reference
    initial_heading_delay_sec: float = INITIAL_HEADING_DELAY_S

    def validate(self) -> 'PDRConfig':
        """
        Check every parameter is in range.

        Returns:
            The config itself, so calls can be chained

        Raises:
            ConfigurationError: On the first out-of-range value
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{f.name} must be a number, got {value!r}")

        if not 0.0 < self.alpha <= 1.0:
            raise ConfigurationError(f"alpha must be in (0, 1], got {self.alpha}")
        if (not math.isfinite(self.window_size)
                or int(self.window_size) != self.window_size
                or self.window_size < 1):
            raise ConfigurationError(f"window_size must be a positive integer, got {self.window_size}")

        positive = (
            'step_distance_meters',
            'earth_radius_meters',
            'process_noise',
            'measurement_noise',
            'min_cos_latitude',
        )
        for name in positive:
            if not getattr(self, name) > 0.0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

        non_negative = (
            'step_detection_threshold',
            'refractory_period_sec',
            'initial_uncertainty',
            'initial_heading_delay_sec',
        )
        for name in non_negative:
            if not getattr(self, name) >= 0.0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")

        return self

    def with_overrides(self, **overrides) -> 'PDRConfig':
        """Copy of this config with some values replaced, validated."""
        return replace(self, **overrides).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'PDRConfig':
        """
        Build a config from a dictionary, defaults filling the gaps.

        Raises:
            ConfigurationError: On unknown keys or out-of-range values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values).validate()


DEFAULT_CONFIG = PDRConfig()


def load_config(config_file: str, defaults: Optional[PDRConfig] = None) -> PDRConfig:
    """
    Load configuration from a JSON file.

    Values in the file override the defaults. A missing file is not an
    error: the defaults are returned.

    Args:
        config_file: Path to configuration file
        defaults: Base configuration (DEFAULT_CONFIG when omitted)

    Returns:
        Validated PDRConfig
    """
    base = defaults or DEFAULT_CONFIG

    if not os.path.exists(config_file):
        logger.info("Config file %s not found, using defaults", config_file)
        return base

    try:
        with open(config_file, 'r') as f:
            file_config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_file}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigurationError(f"{config_file} must contain a JSON object")

    merged = base.to_dict()
    merged.update(file_config)
    config = PDRConfig.from_dict(merged)

    logger.info("Configuration loaded from %s", config_file)
    return config


def save_config(config: PDRConfig, config_file: str):
    """Save configuration to a JSON file."""
    with open(config_file, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.info("Configuration saved to %s", config_file)
