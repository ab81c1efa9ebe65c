"""
Pedestrian dead reckoning core.

This package provides platform-independent implementations of:
- Signal smoothing for acceleration and heading samples
- Step detection with a refractory period
- Step displacement on a spherical Earth
- A recursive position filter
- The dead reckoning controller tying them together
"""

__version__ = "1.0.0"
__author__ = "PDR Engine Team"

from .config import PDRConfig, DEFAULT_CONFIG, load_config, save_config
from .exceptions import (
    PDRError,
    NoFixAvailable,
    InvalidSample,
    NumericDegeneracy,
    ConfigurationError,
    ChannelClosed,
)
from .sensors import Coordinate, Vector3, SensorReading, StepEvent, StepDetector
from .filters import PositionFilter, PositionFilterState, LowPassFilter, MovingAverageFilter
from .navigation import (
    DeadReckoning,
    DirectionLabel,
    FusionEvent,
    Diagnostics,
    SampleChannel,
    TrackingStatus,
    determine_direction,
)

__all__ = [
    "PDRConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config",
    "PDRError",
    "NoFixAvailable",
    "InvalidSample",
    "NumericDegeneracy",
    "ConfigurationError",
    "ChannelClosed",
    "Coordinate",
    "Vector3",
    "SensorReading",
    "StepEvent",
    "StepDetector",
    "PositionFilter",
    "PositionFilterState",
    "LowPassFilter",
    "MovingAverageFilter",
    "DeadReckoning",
    "DirectionLabel",
    "FusionEvent",
    "Diagnostics",
    "SampleChannel",
    "TrackingStatus",
    "determine_direction",
]
