"""
Mathematical and physical constants for pedestrian dead reckoning.
"""

import math

# Earth parameters
EARTH_RADIUS_M = 6371000.0  # Mean Earth radius in meters

# Conversion factors
DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi

# Heading
FULL_CIRCLE_DEG = 360.0
HALF_CIRCLE_DEG = 180.0

# Signal smoothing
ACCEL_LOW_PASS_ALPHA = 0.1   # Exponential filter weight of the new sample
HEADING_WINDOW_SIZE = 5      # Moving-average window length (samples)

# Step detection (tuned for a hand-held phone)
STEP_DETECTION_THRESHOLD = 0.15  # User acceleration magnitude (g)
STEP_REFRACTORY_PERIOD_S = 0.3   # Minimum spacing between steps
STEP_DISTANCE_M = 0.65           # Nominal stride length

# Heading reference latch
INITIAL_HEADING_DELAY_S = 2.0

# Position filter
POSITION_PROCESS_NOISE = 0.01
POSITION_MEASUREMENT_NOISE = 0.1
INITIAL_POSITION_UNCERTAINTY = 1.0

# Below this cos(latitude) the longitude step is treated as degenerate
MIN_COS_LATITUDE = 1e-9
