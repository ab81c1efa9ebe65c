"""
Pedestrian dead reckoning controller.

Sequences the pipeline for every motion sample:

    reading -> low-pass acceleration -> heading window -> step detector
            -> (on step) displacement -> position filter -> FusionEvent
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..config import DEFAULT_CONFIG, PDRConfig
from ..exceptions import InvalidSample, NoFixAvailable, NumericDegeneracy
from ..math.utils import haversine_distance
from ..sensors.reading import Coordinate, SensorReading, StepEvent
from .displacement import DirectionLabel, DisplacementModel, determine_direction
from .state import TrackingStatus, TrackState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostics:
    """Per-step readings reported alongside the position."""

    heading_deg: float
    step_count: int

    def as_dict(self) -> Dict[str, float]:
        return {
            'heading': self.heading_deg,
            'step_count': self.step_count,
        }


@dataclass(frozen=True)
class FusionEvent:
    """Smoothed position emitted after a step."""

    position: Coordinate
    direction: DirectionLabel
    diagnostics: Diagnostics
    timestamp: Optional[float] = None


FusionObserver = Callable[[FusionEvent], None]


class DeadReckoning:
    """
    Step-and-heading position tracker.

    Idle until start_tracking() is given an absolute fix, then turns each
    motion sample into at most one FusionEvent. feed_sample() is serialized
    by a lock; samples are processed strictly one after the other.
    """

    def __init__(self, config: Optional[PDRConfig] = None):
        """
        Initialize the controller.

        Args:
            config: Tuning parameters (defaults when omitted)
        """
        self.config = (config or DEFAULT_CONFIG).validate()

        self.displacement = DisplacementModel(
            step_distance=self.config.step_distance_meters,
            earth_radius=self.config.earth_radius_meters,
            min_cos_latitude=self.config.min_cos_latitude,
        )

        self._lock = threading.Lock()
        self._observers: List[FusionObserver] = []
        self._status = TrackingStatus.IDLE
        self._state: Optional[TrackState] = None

    # Observers

    def add_observer(self, observer: FusionObserver):
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: FusionObserver):
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, event: FusionEvent):
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Observer %r failed on %s", observer, event)

    # Lifecycle

    def start_tracking(self, initial_fix: Optional[Coordinate],
                       timestamp: Optional[float] = None):
        """
        Start (or restart) a tracking session.

        Args:
            initial_fix: Absolute position to start from
            timestamp: Session start time for the initial heading latch;
                the first sample's timestamp when omitted

        Raises:
            NoFixAvailable: If no usable fix was given. The controller
                stays in its previous state.
        """
        if initial_fix is None:
            raise NoFixAvailable("Cannot start tracking without an initial fix")
        if not initial_fix.is_finite():
            raise NoFixAvailable(f"Initial fix is not a valid position: {initial_fix}")

        with self._lock:
            if self._status is TrackingStatus.TRACKING:
                logger.info("Restarting tracking session")

            self._state = TrackState.create(initial_fix, self.config, timestamp)
            self._status = TrackingStatus.TRACKING

        logger.info("Starting tracking from: %s", initial_fix)

    def stop_tracking(self):
        """
        Stop the session.

        Later samples are ignored. Smoothing state is cleared; position and
        step count stay readable until the next start_tracking().
        """
        with self._lock:
            if self._status is TrackingStatus.IDLE:
                return

            self._status = TrackingStatus.IDLE
            self._state.reset_smoothing()
            steps = self._state.step_count

        logger.info("Stopping tracking after %d steps", steps)

    # Sample processing

    def feed_sample(self, reading: SensorReading) -> Optional[FusionEvent]:
        """
        Process one motion sample.

        Args:
            reading: Motion sample

        Returns:
            FusionEvent if the sample produced a step, None otherwise

        Raises:
            InvalidSample: If the reading holds NaN/infinite values. The
                session is unaffected.
        """
        with self._lock:
            event = self._process(reading)

        if event is not None:
            self._notify(event)

        return event

    def _process(self, reading: SensorReading) -> Optional[FusionEvent]:
        if self._status is not TrackingStatus.TRACKING:
            logger.debug("Ignoring sample at t=%.3f while idle", reading.timestamp)
            return None

        state = self._state

        if not reading.is_finite():
            state.samples_rejected += 1
            logger.warning("Rejected non-finite sample at t=%s", reading.timestamp)
            raise InvalidSample(f"Non-finite motion sample at t={reading.timestamp}")

        accel = state.smoother.filter(reading.accel)
        heading = state.heading.update(reading)
        state.samples_processed += 1

        step = state.step_detector.detect(accel.magnitude, reading.timestamp, heading)
        if step is None:
            return None

        return self._apply_step(state, step)

    def _apply_step(self, state: TrackState, step: StepEvent) -> Optional[FusionEvent]:
        previous = state.position_estimate

        try:
            raw_position = self.displacement.displace(previous, step.heading_deg)
            position = state.position_filter.update(raw_position)
        except NumericDegeneracy as e:
            logger.warning("Step %d not applied, position held: %s", state.step_count, e)
            return None

        state.position_estimate = position
        state.distance_m += haversine_distance(
            previous.latitude, previous.longitude,
            position.latitude, position.longitude,
        )

        direction = determine_direction(step.heading_deg)
        logger.debug("Step %d: %s heading %.1f° -> %s",
                     state.step_count, direction, step.heading_deg, position)

        return FusionEvent(
            position=position,
            direction=direction,
            diagnostics=Diagnostics(heading_deg=step.heading_deg, step_count=state.step_count),
            timestamp=step.timestamp,
        )

    def update_compass(self, true_heading_deg: float, accuracy: float = 1.0) -> bool:
        """
        Apply an asynchronous compass callback while tracking.

        Returns:
            True if the heading was applied
        """
        with self._lock:
            if self._status is not TrackingStatus.TRACKING:
                return False
            return self._state.heading.update_compass(true_heading_deg, accuracy)

    # Accessors

    @property
    def status(self) -> TrackingStatus:
        return self._status

    @property
    def is_tracking(self) -> bool:
        return self._status is TrackingStatus.TRACKING

    @property
    def track_state(self) -> Optional[TrackState]:
        return self._state

    @property
    def position(self) -> Optional[Coordinate]:
        return None if self._state is None else self._state.position_estimate

    @property
    def step_count(self) -> int:
        return 0 if self._state is None else self._state.step_count

    @property
    def current_heading_deg(self) -> Optional[float]:
        return None if self._state is None else self._state.current_heading_deg

    @property
    def initial_heading_deg(self) -> Optional[float]:
        return None if self._state is None else self._state.initial_heading_deg

    def get_current_position(self) -> Optional[Dict[str, Any]]:
        """Get current position for a presentation or logging layer."""
        state = self._state
        if state is None:
            return None

        heading = state.current_heading_deg
        return {
            'latitude': state.position_estimate.latitude,
            'longitude': state.position_estimate.longitude,
            'heading': heading,
            'direction': determine_direction(heading).value,
            'step_count': state.step_count,
            'uncertainty': state.filter_state.uncertainty,
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Get session statistics."""
        state = self._state
        stats = {
            'status': self._status.value,
            'step_count': 0,
            'samples_processed': 0,
            'samples_rejected': 0,
            'distance_m': 0.0,
            'filter': None,
        }
        if state is not None:
            stats.update({
                'step_count': state.step_count,
                'samples_processed': state.samples_processed,
                'samples_rejected': state.samples_rejected,
                'distance_m': state.distance_m,
                'filter': state.position_filter.get_statistics(),
            })
        return stats
