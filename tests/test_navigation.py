#!/usr/bin/env python3
"""
Unit tests for displacement, direction labels and the dead reckoning controller.
"""

import math
import unittest
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pdr.config import PDRConfig
from pdr.exceptions import InvalidSample, NoFixAvailable, NumericDegeneracy
from pdr.math import haversine_distance
from pdr.navigation import (
    DeadReckoning,
    DirectionLabel,
    DisplacementModel,
    TrackingStatus,
    determine_direction,
    displace,
)
from pdr.sensors import Coordinate, SensorReading, Vector3

STEP_DEG = 0.65 / 6371000.0 * 180.0 / math.pi
FIRST_GAIN = 1.01 / 1.11


def step_reading(t, yaw=0.0, accel=(0.0, 0.0, 2.0), **kwargs):
    return SensorReading(accel=Vector3(*accel), attitude_yaw_deg=yaw, timestamp=t, **kwargs)


def quiet_reading(t, yaw=0.0):
    return SensorReading(accel=Vector3.zero(), attitude_yaw_deg=yaw, timestamp=t)


class TestDetermineDirection(unittest.TestCase):
    """Test the eight-octant direction labels."""

    def test_octant_centres(self):
        cases = {
            0.0: DirectionLabel.NORTH,
            45.0: DirectionLabel.NORTHEAST,
            90.0: DirectionLabel.EAST,
            135.0: DirectionLabel.SOUTHEAST,
            180.0: DirectionLabel.SOUTH,
            -135.0: DirectionLabel.SOUTHWEST,
            -90.0: DirectionLabel.WEST,
            -45.0: DirectionLabel.NORTHWEST,
        }
        for heading, label in cases.items():
            self.assertEqual(determine_direction(heading), label, msg=f"heading {heading}")

    def test_documented_values(self):
        self.assertEqual(determine_direction(0.0), DirectionLabel.NORTH)
        self.assertEqual(determine_direction(44.9), DirectionLabel.NORTHEAST)
        self.assertEqual(determine_direction(90.0), DirectionLabel.EAST)
        self.assertEqual(determine_direction(179.9), DirectionLabel.SOUTH)
        self.assertEqual(determine_direction(-179.9), DirectionLabel.SOUTH)
        self.assertEqual(determine_direction(-90.0), DirectionLabel.WEST)

    def test_boundaries_belong_to_upper_bucket(self):
        cases = {
            -22.5: DirectionLabel.NORTH,
            22.5: DirectionLabel.NORTHEAST,
            67.5: DirectionLabel.EAST,
            112.5: DirectionLabel.SOUTHEAST,
            157.5: DirectionLabel.SOUTH,
            -157.5: DirectionLabel.SOUTHWEST,
            -112.5: DirectionLabel.WEST,
            -67.5: DirectionLabel.NORTHWEST,
        }
        for heading, label in cases.items():
            self.assertEqual(determine_direction(heading), label, msg=f"heading {heading}")

    def test_unsigned_headings(self):
        """Headings in [0, 360) map the same as their signed equivalents."""
        self.assertEqual(determine_direction(270.0), DirectionLabel.WEST)
        self.assertEqual(determine_direction(225.0), DirectionLabel.SOUTHWEST)
        self.assertEqual(determine_direction(315.0), DirectionLabel.NORTHWEST)
        self.assertEqual(determine_direction(359.9), DirectionLabel.NORTH)
        self.assertEqual(determine_direction(200.0), DirectionLabel.SOUTH)

    def test_nan_defaults_to_north(self):
        self.assertEqual(determine_direction(np.nan), DirectionLabel.NORTH)

    def test_label_text(self):
        self.assertEqual(str(DirectionLabel.SOUTHEAST), "Southeast")
        self.assertEqual(DirectionLabel.NORTH, "North")


class TestDisplacementModel(unittest.TestCase):
    """Test DisplacementModel class."""

    def setUp(self):
        self.model = DisplacementModel(step_distance=0.65, earth_radius=6371000.0)

    def test_north_step(self):
        result = self.model.displace(Coordinate(0.0, 0.0), 0.0)

        self.assertAlmostEqual(result.latitude, STEP_DEG, places=12)
        self.assertAlmostEqual(result.latitude, 0.00000585, delta=1e-8)
        self.assertEqual(result.longitude, 0.0)

    def test_east_step_scales_with_latitude(self):
        at_equator = self.model.displace(Coordinate(0.0, 0.0), 90.0)
        at_60 = self.model.displace(Coordinate(60.0, 0.0), 90.0)

        self.assertAlmostEqual(at_equator.longitude, STEP_DEG, places=12)
        self.assertAlmostEqual(at_60.longitude, 2 * STEP_DEG, places=12)
        self.assertAlmostEqual(at_60.latitude, 60.0, places=12)

    def test_step_length_on_ground(self):
        start = Coordinate(37.7749, -122.4194)
        for heading in (0.0, 45.0, 90.0, 200.0, 300.0):
            end = self.model.displace(start, heading)
            distance = haversine_distance(start.latitude, start.longitude, end.latitude, end.longitude)
            self.assertAlmostEqual(distance, 0.65, delta=1e-3, msg=f"heading {heading}")

    def test_south_west_step(self):
        result = self.model.displace(Coordinate(10.0, 10.0), 225.0)
        self.assertLess(result.latitude, 10.0)
        self.assertLess(result.longitude, 10.0)

    def test_pole_is_degenerate(self):
        for latitude in (90.0, -90.0):
            with self.assertRaises(NumericDegeneracy):
                self.model.displace(Coordinate(latitude, 0.0), 90.0)

    def test_non_finite_input_is_degenerate(self):
        with self.assertRaises(NumericDegeneracy):
            self.model.displace(Coordinate(0.0, 0.0), np.nan)
        with self.assertRaises(NumericDegeneracy):
            self.model.displace(Coordinate(np.inf, 0.0), 0.0)

    def test_near_pole_is_finite(self):
        result = self.model.displace(Coordinate(89.9, 0.0), 90.0)
        self.assertTrue(result.is_finite())

    def test_module_function(self):
        result = displace(Coordinate(0.0, 0.0), 0.0, step_distance=1.3)
        self.assertAlmostEqual(result.latitude, 2 * STEP_DEG, places=12)


class TestDeadReckoning(unittest.TestCase):
    """Test DeadReckoning controller."""

    def setUp(self):
        self.dr = DeadReckoning()
        self.origin = Coordinate(0.0, 0.0)

    def test_initial_state(self):
        self.assertEqual(self.dr.status, TrackingStatus.IDLE)
        self.assertFalse(self.dr.is_tracking)
        self.assertIsNone(self.dr.position)
        self.assertEqual(self.dr.step_count, 0)
        self.assertIsNone(self.dr.get_current_position())

    def test_start_requires_fix(self):
        with self.assertRaises(NoFixAvailable):
            self.dr.start_tracking(None)
        with self.assertRaises(NoFixAvailable):
            self.dr.start_tracking(Coordinate(np.nan, 0.0))
        self.assertEqual(self.dr.status, TrackingStatus.IDLE)

    def test_failed_restart_keeps_session(self):
        self.dr.start_tracking(self.origin)
        self.dr.feed_sample(step_reading(1.0))

        with self.assertRaises(NoFixAvailable):
            self.dr.start_tracking(None)

        self.assertTrue(self.dr.is_tracking)
        self.assertEqual(self.dr.step_count, 1)

    def test_first_step_north(self):
        """One step due north from (0, 0)."""
        self.dr.start_tracking(self.origin)
        event = self.dr.feed_sample(step_reading(1.0, yaw=0.0))

        self.assertIsNotNone(event)
        self.assertAlmostEqual(event.position.latitude, 0.00000585, delta=1e-6)
        self.assertAlmostEqual(event.position.latitude, STEP_DEG * FIRST_GAIN, places=12)
        self.assertEqual(event.position.longitude, 0.0)
        self.assertEqual(event.direction, DirectionLabel.NORTH)
        self.assertEqual(event.diagnostics.step_count, 1)
        self.assertEqual(event.diagnostics.heading_deg, 0.0)
        self.assertEqual(event.timestamp, 1.0)
        self.assertEqual(self.dr.step_count, 1)
        self.assertEqual(self.dr.position, event.position)

    def test_diagnostics_dict(self):
        self.dr.start_tracking(self.origin)
        event = self.dr.feed_sample(step_reading(1.0, yaw=90.0))

        self.assertEqual(event.diagnostics.as_dict(), {'heading': 90.0, 'step_count': 1})
        self.assertEqual(event.direction, DirectionLabel.EAST)

    def test_quiet_samples_produce_nothing(self):
        self.dr.start_tracking(self.origin)
        for i in range(20):
            self.assertIsNone(self.dr.feed_sample(quiet_reading(i * 0.1)))

        self.assertEqual(self.dr.step_count, 0)
        self.assertEqual(self.dr.position, self.origin)

    def test_acceleration_is_smoothed_before_detection(self):
        """A single raw spike below threshold / alpha does not make a step."""
        self.dr.start_tracking(self.origin)
        self.assertIsNone(self.dr.feed_sample(step_reading(1.0, accel=(0.0, 0.0, 1.0))))
        self.assertAlmostEqual(self.dr.track_state.smoothed_accel.z, 0.1)

    def test_sustained_walk_east(self):
        self.dr.start_tracking(self.origin)
        events = [self.dr.feed_sample(step_reading(i * 0.25, yaw=90.0)) for i in range(10)]
        events = [e for e in events if e is not None]

        # Steps at 0.0, 0.5, 1.0, 1.5 and 2.0 s
        self.assertEqual(len(events), 5)
        self.assertEqual([e.diagnostics.step_count for e in events], [1, 2, 3, 4, 5])

        longitudes = [e.position.longitude for e in events]
        self.assertEqual(longitudes, sorted(longitudes))
        for e in events:
            self.assertEqual(e.direction, DirectionLabel.EAST)
            self.assertAlmostEqual(e.position.latitude, 0.0, places=12)

        # Each step advances the estimate by gain * step, and the gain decays
        self.assertGreater(longitudes[-1], 2 * STEP_DEG)
        self.assertLess(longitudes[-1], 3 * STEP_DEG)

    def test_heading_is_smoothed(self):
        self.dr.start_tracking(self.origin)
        for i, yaw in enumerate([0.0, 10.0, 20.0]):
            self.dr.feed_sample(quiet_reading(i * 0.1, yaw=yaw))

        event = self.dr.feed_sample(step_reading(1.0, yaw=30.0))
        self.assertAlmostEqual(event.diagnostics.heading_deg, 15.0)

    def test_compass_in_reading(self):
        self.dr.start_tracking(self.origin)
        event = self.dr.feed_sample(step_reading(1.0, yaw=100.0, compass_heading_deg=80.0))
        self.assertAlmostEqual(event.diagnostics.heading_deg, 90.0)

    def test_update_compass(self):
        self.assertFalse(self.dr.update_compass(45.0, accuracy=5.0))

        self.dr.start_tracking(self.origin)
        self.assertTrue(self.dr.update_compass(45.0, accuracy=5.0))
        self.assertEqual(self.dr.current_heading_deg, 45.0)
        self.assertFalse(self.dr.update_compass(90.0, accuracy=-1.0))

    def test_invalid_sample_leaves_state(self):
        self.dr.start_tracking(self.origin)
        self.dr.feed_sample(step_reading(1.0, yaw=10.0))

        state = self.dr.track_state
        before = (
            state.position_estimate,
            state.step_count,
            state.last_step_timestamp,
            state.smoothed_accel,
            state.heading_window.contents,
            state.filter_state.uncertainty,
        )

        bad_samples = [
            step_reading(2.0, yaw=np.nan),
            step_reading(2.0, accel=(np.inf, 0.0, 0.0)),
            step_reading(2.0, compass_heading_deg=np.nan),
            step_reading(np.nan),
        ]
        with self.assertLogs('pdr.navigation.dead_reckoning', level='WARNING'):
            for bad in bad_samples:
                with self.assertRaises(InvalidSample):
                    self.dr.feed_sample(bad)

        after = (
            state.position_estimate,
            state.step_count,
            state.last_step_timestamp,
            state.smoothed_accel,
            state.heading_window.contents,
            state.filter_state.uncertainty,
        )
        self.assertEqual(before, after)
        self.assertEqual(self.dr.get_statistics()['samples_rejected'], 4)

        # Session continues
        self.assertIsNotNone(self.dr.feed_sample(step_reading(2.0, yaw=10.0)))
        self.assertEqual(self.dr.step_count, 2)

    def test_stop_tracking(self):
        self.dr.start_tracking(self.origin)
        event = self.dr.feed_sample(step_reading(1.0))

        self.dr.stop_tracking()

        self.assertEqual(self.dr.status, TrackingStatus.IDLE)
        self.assertEqual(self.dr.position, event.position)
        self.assertEqual(self.dr.step_count, 1)
        self.assertEqual(len(self.dr.track_state.heading_window), 0)
        self.assertEqual(self.dr.track_state.smoothed_accel, Vector3.zero())

        # Samples are ignored while idle
        self.assertIsNone(self.dr.feed_sample(step_reading(5.0)))
        self.assertEqual(self.dr.step_count, 1)

    def test_stop_while_idle_is_noop(self):
        self.dr.stop_tracking()
        self.assertEqual(self.dr.status, TrackingStatus.IDLE)

        self.dr.start_tracking(self.origin)
        self.dr.stop_tracking()
        self.dr.stop_tracking()
        self.assertEqual(self.dr.status, TrackingStatus.IDLE)

    def test_restart_reinitializes(self):
        self.dr.start_tracking(self.origin)
        self.dr.feed_sample(step_reading(1.0))
        self.dr.feed_sample(step_reading(2.0))

        new_fix = Coordinate(51.5007, -0.1246)
        self.dr.start_tracking(new_fix)

        self.assertTrue(self.dr.is_tracking)
        self.assertEqual(self.dr.position, new_fix)
        self.assertEqual(self.dr.step_count, 0)
        self.assertEqual(self.dr.track_state.filter_state.uncertainty, 1.0)
        self.assertEqual(len(self.dr.track_state.heading_window), 0)

        # The refractory timer starts over with the session
        self.assertIsNotNone(self.dr.feed_sample(step_reading(2.1)))

    def test_initial_heading(self):
        self.dr.start_tracking(self.origin, timestamp=0.0)
        self.dr.feed_sample(quiet_reading(1.0, yaw=45.0))
        self.assertIsNone(self.dr.initial_heading_deg)

        self.dr.feed_sample(quiet_reading(2.0, yaw=45.0))
        self.assertAlmostEqual(self.dr.initial_heading_deg, 45.0)

    def test_degenerate_step_holds_position(self):
        pole = Coordinate(90.0, 0.0)
        self.dr.start_tracking(pole)

        with self.assertLogs('pdr.navigation.dead_reckoning', level='WARNING'):
            event = self.dr.feed_sample(step_reading(1.0, yaw=90.0))

        self.assertIsNone(event)
        self.assertEqual(self.dr.position, pole)
        self.assertEqual(self.dr.step_count, 1)
        self.assertTrue(self.dr.is_tracking)

    def test_observers(self):
        received = []
        self.dr.add_observer(received.append)
        self.dr.add_observer(received.append)

        self.dr.start_tracking(self.origin)
        event = self.dr.feed_sample(step_reading(1.0))
        self.dr.feed_sample(quiet_reading(1.1))

        self.assertEqual(received, [event])

        self.dr.remove_observer(received.append)
        self.dr.feed_sample(step_reading(2.0))
        self.assertEqual(len(received), 1)

    def test_failing_observer_does_not_break_session(self):
        def broken(event):
            raise RuntimeError("display unavailable")

        received = []
        self.dr.add_observer(broken)
        self.dr.add_observer(received.append)
        self.dr.start_tracking(self.origin)

        with self.assertLogs('pdr.navigation.dead_reckoning', level='ERROR'):
            event = self.dr.feed_sample(step_reading(1.0))

        self.assertIsNotNone(event)
        self.assertEqual(received, [event])

    def test_custom_config(self):
        config = PDRConfig(step_distance_meters=1.3, step_detection_threshold=0.5)
        dr = DeadReckoning(config)
        dr.start_tracking(self.origin)

        # Smoothed magnitude 0.2 is below the raised threshold
        self.assertIsNone(dr.feed_sample(step_reading(1.0)))
        event = dr.feed_sample(step_reading(2.0, accel=(0.0, 0.0, 10.0)))

        self.assertIsNotNone(event)
        self.assertAlmostEqual(event.position.latitude, 2 * STEP_DEG * FIRST_GAIN, places=12)

    def test_get_current_position(self):
        self.dr.start_tracking(self.origin)
        self.dr.feed_sample(step_reading(1.0, yaw=180.0))

        current = self.dr.get_current_position()
        self.assertLess(current['latitude'], 0.0)
        self.assertEqual(current['direction'], "South")
        self.assertEqual(current['step_count'], 1)
        self.assertLess(current['uncertainty'], 1.0)

    def test_get_statistics(self):
        stats = self.dr.get_statistics()
        self.assertEqual(stats['status'], 'idle')
        self.assertIsNone(stats['filter'])

        self.dr.start_tracking(self.origin)
        for i in range(4):
            self.dr.feed_sample(step_reading(i * 0.5))

        stats = self.dr.get_statistics()
        self.assertEqual(stats['status'], 'tracking')
        self.assertEqual(stats['step_count'], 4)
        self.assertEqual(stats['samples_processed'], 4)
        self.assertEqual(stats['filter']['updates'], 4)
        self.assertGreater(stats['distance_m'], 0.5)
        self.assertLess(stats['distance_m'], 4 * 0.65)


if __name__ == '__main__':
    unittest.main()
