"""
Smoothing and recursive filters for the dead reckoning pipeline.
"""

from .smoothing import smooth_acceleration, smooth_heading, LowPassFilter, MovingAverageFilter
from .position_filter import PositionFilter, PositionFilterState

__all__ = [
    "smooth_acceleration",
    "smooth_heading",
    "LowPassFilter",
    "MovingAverageFilter",
    "PositionFilter",
    "PositionFilterState",
]
