"""
Recursive position filter for step-by-step dead reckoning.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from ..exceptions import NumericDegeneracy
from ..math.constants import (
    INITIAL_POSITION_UNCERTAINTY,
    POSITION_MEASUREMENT_NOISE,
    POSITION_PROCESS_NOISE,
)
from ..sensors.reading import Coordinate

logger = logging.getLogger(__name__)


@dataclass
class PositionFilterState:
    """
    Belief held by the position filter.

    estimate is None until the filter is reset to a position or bootstraps
    from its first measurement. uncertainty is never negative.
    """

    estimate: Optional[Coordinate] = None
    uncertainty: float = INITIAL_POSITION_UNCERTAINTY

    def copy(self) -> 'PositionFilterState':
        return PositionFilterState(estimate=self.estimate, uncertainty=self.uncertainty)


class PositionFilter:
    """
    Scalar Kalman-style smoother over position samples.

    One uncertainty value is shared by latitude and longitude. There is no
    velocity state and no cross-axis correlation: each update blends the
    raw displaced position into the estimate with gain
    p / (p + measurement_noise), where p = uncertainty + process_noise.
    """

    def __init__(self,
                 process_noise: float = POSITION_PROCESS_NOISE,
                 measurement_noise: float = POSITION_MEASUREMENT_NOISE,
                 initial_uncertainty: float = INITIAL_POSITION_UNCERTAINTY,
                 state: Optional[PositionFilterState] = None):
        """
        Initialize the position filter.

        Args:
            process_noise: Uncertainty added by each prediction
            measurement_noise: Uncertainty of a raw displaced position
            initial_uncertainty: Prior restored by reset()
            state: Existing state to operate on (a fresh one when omitted)
        """
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise
        self.initial_uncertainty = initial_uncertainty

        self.state = state if state is not None else PositionFilterState(
            uncertainty=initial_uncertainty)

        # Statistics
        self.update_count = 0
        self.last_gain: Optional[float] = None

    @property
    def estimate(self) -> Optional[Coordinate]:
        return self.state.estimate

    @property
    def uncertainty(self) -> float:
        return self.state.uncertainty

    def reset(self, to: Optional[Coordinate] = None):
        """
        Reset the belief.

        Args:
            to: New estimate. With None the next update bootstraps.
        """
        self.state.estimate = to
        self.state.uncertainty = self.initial_uncertainty
        self.update_count = 0
        self.last_gain = None

    def update(self, raw_position: Coordinate) -> Coordinate:
        """
        Fuse a raw position into the estimate.

        Args:
            raw_position: Position displaced by the latest step

        Returns:
            Updated estimate
        """
        if not raw_position.is_finite():
            raise NumericDegeneracy(f"Non-finite position measurement {raw_position}")

        if self.state.estimate is None:
            # Bootstrap: adopt the first measurement as is
            self.state.estimate = raw_position
            self.update_count += 1
            logger.debug("Position filter bootstrapped at %s", raw_position)
            return raw_position

        # Prediction: the estimate carries over, uncertainty grows
        predicted_uncertainty = self.state.uncertainty + self.process_noise

        # Measurement update
        gain = predicted_uncertainty / (predicted_uncertainty + self.measurement_noise)
        prior = self.state.estimate.as_array()
        updated = prior + gain * (raw_position.as_array() - prior)

        self.state.estimate = Coordinate(latitude=float(updated[0]), longitude=float(updated[1]))
        self.state.uncertainty = (1 - gain) * predicted_uncertainty

        self.update_count += 1
        self.last_gain = gain

        return self.state.estimate

    def steady_state_uncertainty(self) -> float:
        """
        Fixed point of the uncertainty recursion.

        Solves u = (u + q) * r / (u + q + r) for u >= 0, which gives
        u = (-q + sqrt(q² + 4qr)) / 2.
        """
        q = self.process_noise
        r = self.measurement_noise
        return float((-q + np.sqrt(q * q + 4 * q * r)) / 2)

    def get_statistics(self) -> Dict[str, Any]:
        """Get filter statistics."""
        estimate = self.state.estimate
        return {
            'updates': self.update_count,
            'uncertainty': self.state.uncertainty,
            'last_gain': self.last_gain,
            'steady_state_uncertainty': self.steady_state_uncertainty(),
            'estimate': None if estimate is None else (estimate.latitude, estimate.longitude),
        }
