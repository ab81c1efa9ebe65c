"""
Per-session tracking state for the dead reckoning controller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import DEFAULT_CONFIG, PDRConfig
from ..filters.position_filter import PositionFilter, PositionFilterState
from ..filters.smoothing import LowPassFilter
from ..sensors.reading import Coordinate, Vector3
from ..sensors.step_detector import StepDetector
from .heading import HeadingEstimator


class TrackingStatus(Enum):
    """Controller lifecycle state."""

    IDLE = "idle"
    TRACKING = "tracking"


@dataclass
class TrackState:
    """
    Everything one tracking session mutates.

    Created at start_tracking and owned by a single controller. The
    pipeline stages each hold their slice of it:
    - smoother: low-pass acceleration prior
    - heading: moving-average window, current and initial heading
    - step_detector: step count and last step time
    - position_filter: estimate and uncertainty
    """

    position_estimate: Coordinate
    smoother: LowPassFilter
    heading: HeadingEstimator
    step_detector: StepDetector
    position_filter: PositionFilter

    # Bookkeeping
    samples_processed: int = 0
    samples_rejected: int = 0
    distance_m: float = 0.0

    @classmethod
    def create(cls, initial_fix: Coordinate,
               config: PDRConfig = DEFAULT_CONFIG,
               start_timestamp: Optional[float] = None) -> 'TrackState':
        """Fresh state positioned at initial_fix."""
        position_filter = PositionFilter(
            process_noise=config.process_noise,
            measurement_noise=config.measurement_noise,
            initial_uncertainty=config.initial_uncertainty,
        )
        position_filter.reset(to=initial_fix)

        heading = HeadingEstimator(
            window_size=config.window_size,
            initial_heading_delay=config.initial_heading_delay_sec,
        )
        heading.start(start_timestamp)

        return cls(
            position_estimate=initial_fix,
            smoother=LowPassFilter(config.alpha),
            heading=heading,
            step_detector=StepDetector(
                threshold=config.step_detection_threshold,
                refractory_period=config.refractory_period_sec,
            ),
            position_filter=position_filter,
        )

    @property
    def current_heading_deg(self) -> float:
        return self.heading.current_heading_deg

    @property
    def initial_heading_deg(self) -> Optional[float]:
        return self.heading.initial_heading_deg

    @property
    def heading_window(self):
        return self.heading.window

    @property
    def step_count(self) -> int:
        return self.step_detector.step_count

    @property
    def last_step_timestamp(self) -> Optional[float]:
        return self.step_detector.last_step_timestamp

    @property
    def filter_state(self) -> PositionFilterState:
        return self.position_filter.state

    @property
    def smoothed_accel(self) -> Vector3:
        return self.smoother.value

    def reset_smoothing(self):
        """Clear smoother prior and heading window, keep position and counts."""
        self.smoother.reset()
        self.heading.window.reset()

    def __str__(self) -> str:
        return (
            f"TrackState(pos={self.position_estimate}, "
            f"heading={self.current_heading_deg:.1f}°, "
            f"steps={self.step_count}, "
            f"uncertainty={self.filter_state.uncertainty:.4f})"
        )
