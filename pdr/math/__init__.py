"""
Mathematical utilities for dead reckoning calculations.
"""

from .utils import (
    normalize_heading,
    signed_heading,
    yaw_to_heading,
    is_finite,
    haversine_distance,
)
from .constants import *

__all__ = [
    "normalize_heading",
    "signed_heading",
    "yaw_to_heading",
    "is_finite",
    "haversine_distance",
]
