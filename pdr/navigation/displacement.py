"""
Step displacement on a spherical Earth and compass direction labels.
"""

import math
from enum import Enum

from ..exceptions import NumericDegeneracy
from ..math.constants import DEG_TO_RAD, EARTH_RADIUS_M, MIN_COS_LATITUDE, RAD_TO_DEG, STEP_DISTANCE_M
from ..math.utils import is_finite, signed_heading
from ..sensors.reading import Coordinate


class DirectionLabel(str, Enum):
    """Eight-point compass direction."""

    NORTH = "North"
    NORTHEAST = "Northeast"
    EAST = "East"
    SOUTHEAST = "Southeast"
    SOUTH = "South"
    SOUTHWEST = "Southwest"
    WEST = "West"
    NORTHWEST = "Northwest"

    def __str__(self) -> str:
        return self.value


# Half-open [low, high) octants in signed degrees. South straddles ±180.
_OCTANTS = (
    (-22.5, 22.5, DirectionLabel.NORTH),
    (22.5, 67.5, DirectionLabel.NORTHEAST),
    (67.5, 112.5, DirectionLabel.EAST),
    (112.5, 157.5, DirectionLabel.SOUTHEAST),
    (157.5, 180.0, DirectionLabel.SOUTH),
    (-180.0, -157.5, DirectionLabel.SOUTH),
    (-157.5, -112.5, DirectionLabel.SOUTHWEST),
    (-112.5, -67.5, DirectionLabel.WEST),
    (-67.5, -22.5, DirectionLabel.NORTHWEST),
)


def determine_direction(heading_deg: float) -> DirectionLabel:
    """
    Map a heading to one of eight 45° compass octants.

    Args:
        heading_deg: Heading in degrees, any winding

    Returns:
        Direction label; North for values that fit no octant (NaN)
    """
    if not is_finite(heading_deg):
        return DirectionLabel.NORTH

    angle = signed_heading(heading_deg)
    for low, high, label in _OCTANTS:
        if low <= angle < high:
            return label
    return DirectionLabel.NORTH


class DisplacementModel:
    """
    Moves a position one step along a heading.

    Local tangent plane approximation, valid for small displacements:

        dlat = d * cos(h) / R
        dlon = d * sin(h) / (R * cos(lat))

    cos(lat) goes to zero at the poles, so positions closer to a pole than
    min_cos_latitude allows are rejected with NumericDegeneracy.
    """

    def __init__(self,
                 step_distance: float = STEP_DISTANCE_M,
                 earth_radius: float = EARTH_RADIUS_M,
                 min_cos_latitude: float = MIN_COS_LATITUDE):
        self.step_distance = step_distance
        self.earth_radius = earth_radius
        self.min_cos_latitude = min_cos_latitude

    def delta(self, latitude: float, heading_deg: float):
        """
        Angular step in radians at the given latitude.

        Returns:
            (delta_lat, delta_lon) in radians
        """
        heading_rad = heading_deg * DEG_TO_RAD
        cos_lat = math.cos(latitude * DEG_TO_RAD)

        if abs(cos_lat) < self.min_cos_latitude:
            raise NumericDegeneracy(
                f"Longitude step undefined at latitude {latitude:.6f}° (cos={cos_lat:.3e})")

        delta_lat = (self.step_distance * math.cos(heading_rad)) / self.earth_radius
        delta_lon = (self.step_distance * math.sin(heading_rad)) / (self.earth_radius * cos_lat)
        return delta_lat, delta_lon

    def displace(self, position: Coordinate, heading_deg: float) -> Coordinate:
        """
        Position after one step.

        Args:
            position: Current position
            heading_deg: Step heading in degrees (0 = north, clockwise)

        Returns:
            Displaced position

        Raises:
            NumericDegeneracy: Near the poles or on non-finite input
        """
        if not is_finite(position.latitude, position.longitude, heading_deg):
            raise NumericDegeneracy(f"Cannot displace {position} along heading {heading_deg}")

        delta_lat, delta_lon = self.delta(position.latitude, heading_deg)

        new_position = Coordinate(
            latitude=position.latitude + delta_lat * RAD_TO_DEG,
            longitude=position.longitude + delta_lon * RAD_TO_DEG,
        )

        if not new_position.is_finite():
            raise NumericDegeneracy(f"Displacement from {position} is not finite")

        return new_position


def displace(position: Coordinate, heading_deg: float,
             step_distance: float = STEP_DISTANCE_M,
             earth_radius: float = EARTH_RADIUS_M) -> Coordinate:
    """Displace a position by one step with the given parameters."""
    return DisplacementModel(step_distance, earth_radius).displace(position, heading_deg)
