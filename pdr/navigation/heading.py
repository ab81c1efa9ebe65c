"""
Heading estimation from attitude yaw and compass samples.
"""

import logging
from typing import Optional

from ..exceptions import InvalidSample
from ..filters.smoothing import MovingAverageFilter
from ..math.constants import HEADING_WINDOW_SIZE, INITIAL_HEADING_DELAY_S
from ..math.utils import is_finite, normalize_heading
from ..sensors.reading import SensorReading

logger = logging.getLogger(__name__)


class HeadingEstimator:
    """
    Smoothed heading in degrees, 0 = north, clockwise, in [0, 360).

    Two sources feed one moving-average window:
    - attitude yaw, pushed on every motion sample
    - compass heading, pushed before the yaw when a motion sample carries
      a valid one

    The asynchronous compass callback (update_compass) instead overwrites
    the current heading directly, unsmoothed, until the next motion sample.

    The window averages plain scalars, so headings on either side of north
    (e.g. 350 and 10) average to the south.
    """

    def __init__(self,
                 window_size: int = HEADING_WINDOW_SIZE,
                 initial_heading_delay: float = INITIAL_HEADING_DELAY_S):
        self.window = MovingAverageFilter(window_size)
        self.initial_heading_delay = initial_heading_delay

        self.current_heading_deg = 0.0
        self.last_compass_deg: Optional[float] = None

        # Reference heading latched once, initial_heading_delay after start
        self.initial_heading_deg: Optional[float] = None
        self.start_timestamp: Optional[float] = None

    def start(self, timestamp: Optional[float] = None):
        """
        Reset for a new session.

        Args:
            timestamp: Session start time. When None, the first motion
                sample's timestamp is used instead.
        """
        self.window.reset()
        self.current_heading_deg = 0.0
        self.last_compass_deg = None
        self.initial_heading_deg = None
        self.start_timestamp = timestamp

    def update_compass(self, true_heading_deg: float, accuracy: float = 1.0) -> bool:
        """
        Apply a compass callback.

        Args:
            true_heading_deg: Compass true heading in degrees
            accuracy: Reported heading accuracy; <= 0 means invalid

        Returns:
            True if the heading was applied
        """
        if not is_finite(true_heading_deg, accuracy):
            raise InvalidSample(f"Non-finite compass heading {true_heading_deg} (accuracy {accuracy})")

        if accuracy <= 0:
            logger.debug("Ignoring compass heading %.1f° with accuracy %.1f",
                         true_heading_deg, accuracy)
            return False

        self.last_compass_deg = normalize_heading(true_heading_deg)
        self.current_heading_deg = self.last_compass_deg
        return True

    def update(self, reading: SensorReading) -> float:
        """
        Push the headings of one motion sample into the window.

        Args:
            reading: Motion sample

        Returns:
            Smoothed heading in degrees
        """
        if not reading.is_finite():
            raise InvalidSample(f"Non-finite motion sample at t={reading.timestamp}")

        if reading.has_valid_compass:
            self.last_compass_deg = normalize_heading(reading.compass_heading_deg)
            self.current_heading_deg = self.window.add_sample(self.last_compass_deg)

        yaw_heading = normalize_heading(reading.attitude_yaw_deg)
        self.current_heading_deg = self.window.add_sample(yaw_heading)

        self._latch_initial_heading(reading.timestamp)

        return self.current_heading_deg

    def _latch_initial_heading(self, timestamp: float):
        if self.initial_heading_deg is not None:
            return

        if self.start_timestamp is None:
            self.start_timestamp = timestamp
            return

        if timestamp - self.start_timestamp >= self.initial_heading_delay:
            self.initial_heading_deg = self.current_heading_deg
            logger.info("Initial heading set to: %.1f°", self.initial_heading_deg)
