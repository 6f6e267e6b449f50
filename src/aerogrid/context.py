"""
OverlayContext - everything the overlay needs, created at startup.

The context owns the snapshot store, refresh coordinator, activity
tracker and the three update channels. It is passed explicitly to the
daemon and the renderer; nothing in aerogrid keeps module-level state.
"""

import time
from typing import Callable, Dict, Optional

from .activity_tracker import ActivityTracker
from .command_runner import CommandRunner
from .config import OverlayConfig
from .errors import ChannelError
from .file_watch import FileWatchFallback
from .logging_config import get_logger
from .models import Snapshot
from .poll_refresher import PollRefresher
from .push_listener import PushListener
from .refresh_coordinator import RefreshCoordinator
from .settings import resolve_aerospace_bin
from .snapshot_store import SnapshotStore


log = get_logger("context")


class OverlayContext:
    """Wires the store, coordinator and channels together."""

    def __init__(
        self,
        config: Optional[OverlayConfig] = None,
        runner: Optional[CommandRunner] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or OverlayConfig()
        self._clock = clock
        self._overlay_visible = False
        self._started = False

        self.store = SnapshotStore()
        self.runner = runner or CommandRunner(
            binary=resolve_aerospace_bin(self.config.aerospace_bin),
            timeout=self.config.command_timeout,
        )
        self.coordinator = RefreshCoordinator(
            self.store,
            self.runner,
            ttl=self.config.cache_ttl,
            clock=clock,
            windows_query_mode=self.config.windows_query_mode,
            workspace_names=self.config.workspace_names,
        )
        self.activity = ActivityTracker(
            idle_threshold=self.config.idle_threshold,
            clock=clock,
        )
        self.poller = PollRefresher(
            self.coordinator,
            self.activity,
            overlay_visible=lambda: self._overlay_visible,
            interval=self.config.poll_interval,
            active_window=self.config.active_window,
        )
        self.push = PushListener(
            self.store,
            host=self.config.push_host,
            port=self.config.push_port,
            path=self.config.push_path,
            clock=clock,
            on_change=self._on_pushed_workspace if self.config.refresh_on_workspace_change else None,
        )
        self.file_watch = FileWatchFallback(
            self.store,
            path=self.config.workspace_file,
            clock=clock,
        )
        self.background_refresh = not self.config.refresh_on_demand_only

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Seed state, start the channels and preload the window cache."""
        if self._started:
            return
        self._started = True

        if self.config.file_watch_enabled:
            self.file_watch.seed()
            self._start_channel("file watch", self.file_watch.start)
        if self.config.push_enabled:
            self._start_channel("push listener", self.push.start)
        if self.background_refresh:
            self.poller.start()
        else:
            log.info("Background refresh disabled (on-demand mode)")

        self.coordinator.trigger_refresh(forced=False)

    def close(self, timeout: float = 2.0) -> None:
        """Stop every channel and wait briefly for an in-flight fetch."""
        self.poller.stop()
        self.push.stop()
        self.file_watch.stop()
        self.coordinator.wait_idle(timeout)
        self._started = False
        log.info("Overlay context closed")

    def __enter__(self) -> "OverlayContext":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _start_channel(self, name: str, start: Callable[[], None]) -> bool:
        try:
            start()
            return True
        except ChannelError as e:
            log.warning("%s disabled: %s", name.capitalize(), e)
            return False

    def _on_pushed_workspace(self, workspace: str) -> None:
        self.coordinator.force_refresh()

    # ------------------------------------------------------------------
    # Overlay
    # ------------------------------------------------------------------

    @property
    def overlay_visible(self) -> bool:
        return self._overlay_visible

    def get_snapshot(self) -> Snapshot:
        return self.store.get_snapshot()

    def show_overlay(self) -> Snapshot:
        """Mark the overlay shown and return the cached snapshot immediately.

        A refresh is requested in the background (forced when nothing has
        been cached yet); callers render from the returned snapshot and
        pick up newer data by polling get_snapshot().
        """
        self.activity.record_activity()
        self._overlay_visible = True
        snapshot = self.store.get_snapshot()
        self.coordinator.trigger_refresh(forced=snapshot.windows_captured_at is None)
        if snapshot.current_workspace is None:
            self.coordinator.refresh_current_workspace()
        return snapshot

    def hide_overlay(self) -> None:
        self._overlay_visible = False

    def toggle_overlay(self) -> Optional[Snapshot]:
        """Show or hide. Returns the snapshot to draw when showing."""
        self.activity.record_activity()
        if self._overlay_visible:
            self.hide_overlay()
            return None
        return self.show_overlay()

    # ------------------------------------------------------------------
    # Runtime controls
    # ------------------------------------------------------------------

    def enable_background_refresh(self) -> None:
        self.background_refresh = True
        if self._started:
            self.poller.start()

    def disable_background_refresh(self) -> None:
        self.background_refresh = False
        self.poller.stop()

    def toggle_background_refresh(self) -> bool:
        """Returns True if background refresh is now enabled."""
        if self.background_refresh:
            self.disable_background_refresh()
        else:
            self.enable_background_refresh()
        return self.background_refresh

    def toggle_push_listener(self) -> bool:
        """Returns True if the push listener is now running."""
        if self.push.is_running:
            self.push.stop()
        else:
            self._start_channel("push listener", self.push.start)
        return self.push.is_running

    def status(self) -> Dict:
        """Cache and channel status, for display and the daemon state file."""
        snapshot = self.store.get_snapshot()
        state = self.coordinator.state
        now = self._clock()
        outcome = self.coordinator.last_outcome
        return {
            "background_refresh": self.background_refresh,
            "overlay_visible": self._overlay_visible,
            "current_workspace": snapshot.current_workspace,
            "workspace_count": len(snapshot.windows_by_workspace),
            "window_count": snapshot.window_count,
            "cache_age_seconds": (
                None if state.last_full_fetch_at is None else round(now - state.last_full_fetch_at, 1)
            ),
            "cache_valid": self.coordinator.is_fresh(),
            "refresh_in_flight": state.in_flight,
            "push_listener": _channel_status(self.push.is_running, self.push.disabled),
            "push_port": self.push.bound_port,
            "file_watch": _channel_status(self.file_watch.is_running, self.file_watch.disabled),
            "idle": self.activity.is_idle(),
            "last_refresh_ok": outcome.ok if outcome else None,
            "last_refresh_error": outcome.error if outcome else None,
        }


def _channel_status(running: bool, disabled: bool) -> str:
    if running:
        return "running"
    if disabled:
        return "disabled"
    return "stopped"
