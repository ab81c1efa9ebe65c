#!/usr/bin/env python3
"""
Basic usage example of the pedestrian dead reckoning engine.

This example walks a simulated pedestrian around a square and feeds the
motion samples through a SampleChannel into the DeadReckoning controller,
the way a platform sensor adapter would.
"""

import sys
import os
import logging
import threading
import numpy as np

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pdr import Coordinate, DeadReckoning, FusionEvent, SampleChannel, SensorReading, Vector3
from pdr.math import haversine_distance


def simulate_walk(legs, dt=0.2, heading_noise_deg=2.0):
    """
    Simulate a pedestrian walking straight legs.

    Args:
        legs: Sequence of (heading in degrees, number of steps)
        dt: Sample interval in seconds
        heading_noise_deg: Standard deviation of the yaw noise

    Yields:
        SensorReading objects, two per step (impact, then swing)
    """
    n = 0
    for heading, steps in legs:
        for _ in range(steps):
            for impact in (True, False):
                accel = np.random.normal(0, 0.02, 3)
                if impact:
                    accel[2] += 2.5  # Heel strike (g)

                # Every 5th sample also carries a compass reading
                compass = None
                if n % 5 == 0:
                    compass = (heading + np.random.normal(0, 5.0)) % 360

                yield SensorReading(
                    accel=Vector3.from_array(accel),
                    attitude_yaw_deg=heading + np.random.normal(0, heading_noise_deg),
                    timestamp=n * dt,
                    compass_heading_deg=compass,
                    compass_accuracy=5.0 if compass is not None else None,
                )
                n += 1


def print_event(event: FusionEvent):
    """Print one fused position."""
    diag = event.diagnostics
    print(f"Step {diag.step_count:3d}: {event.position}  "
          f"{event.direction.value:<9s} heading {diag.heading_deg:6.1f}°")


def main():
    """Main example function."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Pedestrian Dead Reckoning - Basic Usage Example")
    print("=" * 50)

    # Start from a known fix (San Francisco)
    start = Coordinate(latitude=37.7749, longitude=-122.4194)

    dr = DeadReckoning()
    dr.add_observer(print_event)
    dr.start_tracking(start)

    # Square loop, headings chosen away from north to keep the plain
    # moving-average heading clear of the 0/360 wrap
    legs = [(45.0, 15), (135.0, 15), (225.0, 15), (315.0, 15)]

    # A producer thread stands in for the platform sensor callbacks
    channel = SampleChannel()

    def produce():
        for reading in simulate_walk(legs):
            channel.push(reading)

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    producer.join()
    channel.close()

    print(f"Queued {len(channel)} samples, draining...")
    print()
    events = channel.drain(dr)

    dr.stop_tracking()

    print("\nSimulation completed!")

    final = dr.position
    gap = haversine_distance(start.latitude, start.longitude, final.latitude, final.longitude)
    stats = dr.get_statistics()

    print("\n=== Final Statistics ===")
    print(f"Steps detected:    {stats['step_count']}")
    print(f"Events emitted:    {len(events)}")
    print(f"Samples processed: {stats['samples_processed']}")
    print(f"Distance walked:   {stats['distance_m']:.2f} m")
    print(f"Loop closure gap:  {gap:.2f} m")
    print(f"Initial heading:   {dr.initial_heading_deg:.1f}°")
    print(f"Filter uncertainty: {stats['filter']['uncertainty']:.4f}")


if __name__ == "__main__":
    main()
