"""
Poll Refresher - background timer for the window cache.

Wakes every ``interval`` seconds and asks the coordinator for a
non-forced refresh when refresh_policy.should_poll_refresh allows it.
"""

import threading
from typing import Callable, Optional

from .activity_tracker import ActivityTracker
from .logging_config import get_logger
from .refresh_coordinator import RefreshCoordinator
from .refresh_policy import should_poll_refresh
from .settings import OVERLAY


log = get_logger("poll")


class PollRefresher:
    """
    Background poller.

    - Call .start() to spin up a daemon thread.
    - Call .stop() to ask it to shut down.
    """

    def __init__(
        self,
        coordinator: RefreshCoordinator,
        activity: ActivityTracker,
        overlay_visible: Callable[[], bool],
        interval: float = OVERLAY.poll_interval,
        active_window: float = OVERLAY.active_window,
    ):
        self.coordinator = coordinator
        self.activity = activity
        self.overlay_visible = overlay_visible
        self.interval = interval
        self.active_window = active_window
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()  # protect start/stop

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the polling thread (idempotent)."""
        with self._lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name="PollRefresherThread", daemon=True
            )
            self._thread.start()
        log.info("Background refresh started (every %gs)", self.interval)

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        with self._lock:
            if self._thread is None:
                return
            self._stop_event.set()
            self._thread.join(timeout=timeout)
            self._thread = None
        log.info("Background refresh stopped")

    def tick(self) -> bool:
        """One timer firing. Returns True if a refresh was started."""
        if not should_poll_refresh(
            overlay_visible=self.overlay_visible(),
            in_flight=self.coordinator.in_flight,
            cache_fresh=self.coordinator.is_fresh(),
            seconds_since_activity=self.activity.seconds_since_activity(),
            idle_threshold=self.activity.idle_threshold,
            active_window=self.active_window,
        ):
            return False
        log.debug("Background refresh triggered")
        return self.coordinator.trigger_refresh(forced=False)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception:
                log.exception("Background refresh tick failed")
