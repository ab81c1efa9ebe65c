"""
Single-consumer channel between sensor adapters and the controller.

Sensor callbacks run on whatever thread the platform chooses. They push
readings here; one consumer drains them into DeadReckoning in arrival
order, so the core itself never runs concurrently.
"""

import logging
import queue
import threading
from typing import List, Optional

from ..exceptions import ChannelClosed, InvalidSample
from ..sensors.reading import SensorReading
from .dead_reckoning import DeadReckoning, FusionEvent

logger = logging.getLogger(__name__)


class SampleChannel:
    """FIFO of SensorReadings with any number of producers and one consumer."""

    def __init__(self, maxsize: int = 0):
        """
        Args:
            maxsize: Queue capacity, 0 for unbounded
        """
        self._queue: "queue.Queue[SensorReading]" = queue.Queue(maxsize)
        self._closed = threading.Event()
        self._count_lock = threading.Lock()

        # Statistics
        self.pushed_count = 0
        self.skipped_count = 0

    def push(self, reading: SensorReading, block: bool = True,
             timeout: Optional[float] = None):
        """
        Enqueue a reading. Safe to call from any thread.

        Raises:
            ChannelClosed: After close()
            queue.Full: If the channel is bounded and stays full
        """
        if self._closed.is_set():
            raise ChannelClosed("Sample channel is closed")

        self._queue.put(reading, block, timeout)
        with self._count_lock:
            self.pushed_count += 1

    def drain(self, controller: DeadReckoning,
              max_items: Optional[int] = None) -> List[FusionEvent]:
        """
        Feed queued readings into the controller, oldest first.

        Invalid readings are skipped. Returns immediately once the queue is
        empty; readings pushed meanwhile wait for the next drain.

        Args:
            controller: Consumer of the readings
            max_items: Stop after this many readings (all when None)

        Returns:
            Events emitted while draining, in order
        """
        events = []
        handled = 0

        while max_items is None or handled < max_items:
            try:
                reading = self._queue.get_nowait()
            except queue.Empty:
                break

            handled += 1
            try:
                event = controller.feed_sample(reading)
            except InvalidSample as e:
                self.skipped_count += 1
                logger.debug("Skipped sample while draining: %s", e)
                continue
            finally:
                self._queue.task_done()

            if event is not None:
                events.append(event)

        return events

    def close(self):
        """Refuse further pushes. Readings already queued can still be drained."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __len__(self) -> int:
        return self._queue.qsize()
