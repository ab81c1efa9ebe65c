"""
Sensor data types and step detection.
"""

from .reading import Coordinate, Vector3, SensorReading, StepEvent
from .step_detector import StepDetector

__all__ = ["Coordinate", "Vector3", "SensorReading", "StepEvent", "StepDetector"]
