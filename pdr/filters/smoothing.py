"""
Signal smoothing for raw motion samples.

Acceleration goes through a first-order exponential (low-pass) filter and
headings through a fixed-length moving average.
"""

import logging
from collections import deque
from typing import Deque, List, Optional

import numpy as np

from ..exceptions import InvalidSample
from ..math.constants import ACCEL_LOW_PASS_ALPHA, HEADING_WINDOW_SIZE
from ..math.utils import is_finite
from ..sensors.reading import Vector3

logger = logging.getLogger(__name__)


def smooth_acceleration(prev: Vector3, sample: Vector3,
                        alpha: float = ACCEL_LOW_PASS_ALPHA) -> Vector3:
    """
    Exponential moving average, each axis independently.

    new = alpha * sample + (1 - alpha) * prev

    Args:
        prev: Previous filtered value (zero vector after a reset)
        sample: New raw sample
        alpha: Weight of the new sample, in (0, 1]

    Returns:
        Filtered value
    """
    if not sample.is_finite():
        raise InvalidSample(f"Non-finite acceleration sample: {sample}")

    filtered = alpha * sample.as_array() + (1 - alpha) * prev.as_array()
    return Vector3.from_array(filtered)


def smooth_heading(window: Deque[float], sample: float,
                   window_size: int = HEADING_WINDOW_SIZE) -> float:
    """
    Push a heading into a bounded FIFO and return the window mean.

    The mean is arithmetic, not circular: 350 and 10 average to 180.
    Callers keep headings on one winding to avoid that.

    Args:
        window: FIFO of recent headings, mutated in place
        sample: New heading in degrees
        window_size: Capacity; the oldest value is evicted on overflow

    Returns:
        Mean of the window contents after the push
    """
    if not is_finite(sample):
        raise InvalidSample(f"Non-finite heading sample: {sample}")

    window.append(float(sample))
    while len(window) > window_size:
        window.popleft()

    return float(np.mean(window))


class LowPassFilter:
    """Stateful wrapper around smooth_acceleration."""

    def __init__(self, alpha: float = ACCEL_LOW_PASS_ALPHA):
        self.alpha = alpha
        self.value = Vector3.zero()

    def filter(self, sample: Vector3) -> Vector3:
        self.value = smooth_acceleration(self.value, sample, self.alpha)
        return self.value

    def reset(self):
        self.value = Vector3.zero()


class MovingAverageFilter:
    """Stateful wrapper around smooth_heading."""

    def __init__(self, window_size: int = HEADING_WINDOW_SIZE):
        self.window_size = window_size
        self.samples: Deque[float] = deque()

    def add_sample(self, sample: float) -> float:
        return smooth_heading(self.samples, sample, self.window_size)

    @property
    def average(self) -> Optional[float]:
        """Current mean, or None while the window is empty."""
        if not self.samples:
            return None
        return float(np.mean(self.samples))

    @property
    def contents(self) -> List[float]:
        return list(self.samples)

    def __len__(self) -> int:
        return len(self.samples)

    def reset(self):
        self.samples.clear()
