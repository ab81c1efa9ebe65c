"""
Mathematical utility functions for dead reckoning.
"""

import math

import numpy as np

from .constants import EARTH_RADIUS_M, FULL_CIRCLE_DEG, HALF_CIRCLE_DEG


def normalize_heading(degrees):
    """
    Normalize a heading to the [0, 360) degree range.

    Args:
        degrees (float): Heading in degrees, any winding

    Returns:
        float: Heading in [0, 360)
    """
    return ((degrees % FULL_CIRCLE_DEG) + FULL_CIRCLE_DEG) % FULL_CIRCLE_DEG


def signed_heading(degrees):
    """
    Convert a heading to the signed [-180, 180) degree range.

    Args:
        degrees (float): Heading in degrees, any winding

    Returns:
        float: Heading in [-180, 180)
    """
    heading = normalize_heading(degrees)
    if heading >= HALF_CIRCLE_DEG:
        heading -= FULL_CIRCLE_DEG
    return heading


def yaw_to_heading(yaw_radians):
    """Convert an attitude yaw in radians to a heading in [0, 360) degrees."""
    return normalize_heading(math.degrees(yaw_radians))


def is_finite(*values):
    """True when every value is a finite number."""
    return bool(np.all(np.isfinite(np.asarray(values, dtype=float))))


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Latitude and longitude of first point (degrees)
        lat2, lon2: Latitude and longitude of second point (degrees)

    Returns:
        float: Distance in meters
    """
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    c = 2 * math.asin(math.sqrt(a))

    return EARTH_RADIUS_M * c
