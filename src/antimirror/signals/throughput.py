"""
Throughput Counter
==================

Counts frames accepted by the device and derives a per-window rate.

This counter:
    - Increments total_frames_sent after every successful send
    - Keeps a rolling window (default 1 second)
    - When the window elapses, records the frames sent during it as the
      delta of total_frames_sent since the window start, then opens a new window

Lifecycle:
    Created on each device attachment, discarded on detachment.
    The pipeline zeroes the window rate whenever capture goes idle.
"""

import logging
import time
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class ThroughputCounter:
    """
    Rolling-window frame counter.

    Attributes:
        window_seconds: Length of one measurement window

    Example:
        counter = ThroughputCounter(window_seconds=1.0)

        # after each successful send
        counter.record_send()
        counter.update()

        print(counter.last_window_frames_sent, counter.fps)
    """

    def __init__(
        self,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize counter.

        Args:
            window_seconds: Window length in seconds. Must be > 0.
            clock: Time source in seconds (injectable for tests)
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.window_seconds = window_seconds
        self._clock = clock

        self._total_frames_sent: int = 0
        self._last_window_frames_sent: int = 0
        self._window_start: float = clock()
        self._window_start_total: int = 0

    @property
    def total_frames_sent(self) -> int:
        """Frames accepted by the device since attachment."""
        return self._total_frames_sent

    @property
    def last_window_frames_sent(self) -> int:
        """Frames accepted during the most recent completed window."""
        return self._last_window_frames_sent

    @property
    def window_start(self) -> float:
        return self._window_start

    @property
    def fps(self) -> float:
        """Frames per second over the last completed window."""
        return self._last_window_frames_sent / self.window_seconds

    def record_send(self) -> None:
        """Count one frame accepted by the device."""
        self._total_frames_sent += 1

    def update(self, now: Optional[float] = None) -> bool:
        """
        Close the current window if it has elapsed.

        Args:
            now: Current time; read from the clock when omitted

        Returns:
            True if a window was closed and a new one started
        """
        if now is None:
            now = self._clock()

        if now - self._window_start < self.window_seconds:
            return False

        self._last_window_frames_sent = (
            self._total_frames_sent - self._window_start_total
        )
        self._window_start = now
        self._window_start_total = self._total_frames_sent

        logger.debug(
            f"Throughput window closed: {self._last_window_frames_sent} frames, "
            f"total={self._total_frames_sent}"
        )
        return True

    def clear_rate(self) -> None:
        """Zero the window rate (no frames are flowing) and restart the window."""
        self._last_window_frames_sent = 0
        self._window_start = self._clock()
        self._window_start_total = self._total_frames_sent

    def reset(self) -> None:
        """Zero every counter."""
        self._total_frames_sent = 0
        self._last_window_frames_sent = 0
        self._window_start = self._clock()
        self._window_start_total = 0

    def to_dict(self) -> dict:
        """Export counters for observability."""
        return {
            "total_frames_sent": self._total_frames_sent,
            "last_window_frames_sent": self._last_window_frames_sent,
            "fps": round(self.fps, 2),
        }
