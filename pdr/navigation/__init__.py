"""
Heading estimation, step displacement and the dead reckoning controller.
"""

from .heading import HeadingEstimator
from .displacement import DirectionLabel, DisplacementModel, determine_direction, displace
from .state import TrackingStatus, TrackState
from .dead_reckoning import DeadReckoning, Diagnostics, FusionEvent
from .channel import SampleChannel

__all__ = [
    "HeadingEstimator",
    "DirectionLabel",
    "DisplacementModel",
    "determine_direction",
    "displace",
    "TrackingStatus",
    "TrackState",
    "DeadReckoning",
    "Diagnostics",
    "FusionEvent",
    "SampleChannel",
]
