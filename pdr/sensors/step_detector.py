"""
Step detection from user acceleration magnitude.
"""

import logging
from typing import Optional

from ..math.constants import STEP_DETECTION_THRESHOLD, STEP_REFRACTORY_PERIOD_S
from .reading import StepEvent

logger = logging.getLogger(__name__)


class StepDetector:
    """
    Threshold detector with a refractory period.

    A step fires when the magnitude exceeds the threshold and more than
    refractory_period seconds have passed since the previous step. A
    magnitude that stays high produces one step per refractory window,
    never two.
    """

    def __init__(self,
                 threshold: float = STEP_DETECTION_THRESHOLD,
                 refractory_period: float = STEP_REFRACTORY_PERIOD_S):
        """
        Initialize step detector.

        Args:
            threshold: Magnitude a sample must exceed (strictly)
            refractory_period: Minimum seconds between two steps (strictly)
        """
        self.threshold = threshold
        self.refractory_period = refractory_period

        self.step_count = 0
        self.last_step_timestamp: Optional[float] = None

    def would_fire(self, magnitude: float, timestamp: float) -> bool:
        """Check the detection rule without changing any state."""
        if magnitude <= self.threshold:
            return False
        if self.last_step_timestamp is None:
            return True
        return (timestamp - self.last_step_timestamp) > self.refractory_period

    def detect(self, magnitude: float, timestamp: float,
               heading_deg: float = 0.0) -> Optional[StepEvent]:
        """
        Process one magnitude sample.

        Args:
            magnitude: Smoothed user acceleration magnitude
            timestamp: Sample time (seconds, monotonic)
            heading_deg: Heading to stamp on the event

        Returns:
            StepEvent when a step fires, None otherwise
        """
        if not self.would_fire(magnitude, timestamp):
            return None

        self.step_count += 1
        self.last_step_timestamp = timestamp

        logger.debug("Step %d at t=%.3f (magnitude %.3f, heading %.1f°)",
                     self.step_count, timestamp, magnitude, heading_deg)

        return StepEvent(timestamp=timestamp, heading_deg=heading_deg)

    def reset(self):
        self.step_count = 0
        self.last_step_timestamp = None

    def get_statistics(self) -> dict:
        return {
            'step_count': self.step_count,
            'last_step_timestamp': self.last_step_timestamp,
            'threshold': self.threshold,
            'refractory_period': self.refractory_period,
        }
