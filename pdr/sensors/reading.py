"""
Sensor data types consumed by the dead reckoning core.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..math.utils import is_finite


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in decimal degrees (range is not enforced)."""

    latitude: float
    longitude: float

    def as_array(self) -> np.ndarray:
        """Get position as [latitude, longitude] vector."""
        return np.array([self.latitude, self.longitude])

    def is_finite(self) -> bool:
        return is_finite(self.latitude, self.longitude)

    def __str__(self) -> str:
        return f"({self.latitude:.7f}, {self.longitude:.7f})"


@dataclass(frozen=True)
class Vector3:
    """Triaxial sample, e.g. user acceleration in g."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> 'Vector3':
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, values) -> 'Vector3':
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    @property
    def magnitude(self) -> float:
        """Euclidean norm sqrt(x² + y² + z²)."""
        return float(np.linalg.norm(self.as_array()))

    def is_finite(self) -> bool:
        return is_finite(self.x, self.y, self.z)


@dataclass(frozen=True)
class SensorReading:
    """
    One motion sample.

    accel is the gravity-removed user acceleration. attitude_yaw_deg is the
    device yaw in degrees (any winding). The compass heading is optional;
    a compass_accuracy that is <= 0 or non-finite marks it as invalid.
    """

    accel: Vector3
    attitude_yaw_deg: float
    timestamp: float
    compass_heading_deg: Optional[float] = None
    compass_accuracy: Optional[float] = None

    @classmethod
    def from_attitude(cls, accel, yaw_rad: float, timestamp: float,
                      compass_heading_deg: Optional[float] = None,
                      compass_accuracy: Optional[float] = None) -> 'SensorReading':
        """Build a reading from a device-motion yaw in radians."""
        if not isinstance(accel, Vector3):
            accel = Vector3.from_array(accel)
        return cls(
            accel=accel,
            attitude_yaw_deg=math.degrees(yaw_rad),
            timestamp=timestamp,
            compass_heading_deg=compass_heading_deg,
            compass_accuracy=compass_accuracy,
        )

    @property
    def has_valid_compass(self) -> bool:
        if self.compass_heading_deg is None:
            return False
        if self.compass_accuracy is None:
            return True
        return math.isfinite(self.compass_accuracy) and self.compass_accuracy > 0

    def is_finite(self) -> bool:
        """
        Check every present numeric field is finite.

        compass_accuracy is left out: a bad accuracy only invalidates the
        compass value (see has_valid_compass).
        """
        values = [self.attitude_yaw_deg, self.timestamp]
        if self.compass_heading_deg is not None:
            values.append(self.compass_heading_deg)
        return self.accel.is_finite() and is_finite(*values)


@dataclass(frozen=True)
class StepEvent:
    """A detected footstep."""

    timestamp: float
    heading_deg: float
