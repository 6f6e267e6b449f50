"""
Activity Tracker - when did the user last do something visible?

Only the poll refresher consults this. Push and file-watch updates are
applied regardless of idle state.
"""

import threading
import time
from typing import Callable

from .settings import OVERLAY


class ActivityTracker:
    """Records user-triggered actions such as overlay toggles."""

    def __init__(
        self,
        idle_threshold: float = OVERLAY.idle_threshold,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_threshold = idle_threshold
        self._clock = clock
        self._lock = threading.Lock()
        # Start as active so the first poll window isn't skipped
        self._last_activity_at = clock()

    @property
    def last_activity_at(self) -> float:
        return self._last_activity_at

    def record_activity(self) -> None:
        with self._lock:
            self._last_activity_at = self._clock()

    def seconds_since_activity(self) -> float:
        return self._clock() - self._last_activity_at

    def is_idle(self) -> bool:
        """True when no activity for longer than the idle threshold."""
        return self.seconds_since_activity() > self.idle_threshold
