#!/usr/bin/env python3
"""
Overlay Daemon - headless host for the overlay context.

Starts the context (push listener, file watch, optional background
polling), then loops: consume toggle signals from `aerogrid toggle`
and publish status to the daemon state file for `aerogrid status`.
"""

import os
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import OverlayConfig, get_overlay_config
from .context import OverlayContext
from .daemon_state import OverlayDaemonState
from .logging_config import get_logger, setup_daemon_logging
from .settings import get_daemon_state_path, get_toggle_signal_path


TICK_SECONDS = 0.25


def consume_toggle_signal(signal_path: Optional[Path] = None) -> bool:
    """Check for and consume the toggle signal file."""
    path = signal_path or get_toggle_signal_path()
    # Atomic: just try to unlink, don't check exists() first (TOCTOU race)
    try:
        path.unlink()
        return True
    except OSError:
        return False


class OverlayDaemon:
    """Runs an OverlayContext until SIGTERM/SIGINT."""

    def __init__(
        self,
        config: Optional[OverlayConfig] = None,
        context: Optional[OverlayContext] = None,
        state_path: Optional[Path] = None,
        signal_path: Optional[Path] = None,
    ):
        self.config = config or get_overlay_config()
        self.context = context or OverlayContext(self.config)
        self.state_path = state_path or get_daemon_state_path()
        self.signal_path = signal_path or get_toggle_signal_path()
        self.log = get_logger("daemon")
        self.state = OverlayDaemonState(pid=os.getpid(), started_at=datetime.now())
        self._shutdown = threading.Event()

    def request_shutdown(self) -> None:
        self._shutdown.set()

    def publish_state(self) -> None:
        self.state.last_update = datetime.now()
        self.state.context = self.context.status()
        self.state.snapshot = self.context.get_snapshot().to_dict()
        try:
            self.state.save(self.state_path)
        except OSError as e:
            self.log.warning("Could not write daemon state: %s", e)

    def handle_toggle(self) -> None:
        snapshot = self.context.toggle_overlay()
        if snapshot is None:
            self.log.info("Overlay hidden")
        else:
            self.log.info(
                "Overlay shown: workspace %s, %d windows cached",
                snapshot.current_workspace or "unknown", snapshot.window_count,
            )

    def run_once(self) -> None:
        """One loop iteration: toggle signal, then status if due."""
        if consume_toggle_signal(self.signal_path):
            self.handle_toggle()

    def run(self) -> None:
        """Main daemon loop."""
        def handle_shutdown(signum, frame):
            self.log.info("Shutdown signal received")
            self.request_shutdown()

        signal.signal(signal.SIGTERM, handle_shutdown)
        signal.signal(signal.SIGINT, handle_shutdown)

        self.log.info("Overlay daemon starting (PID %d)", self.state.pid)
        self.context.start()
        self.state.status = "running"
        self.publish_state()

        ticks_per_status = max(1, int(self.config.status_interval / TICK_SECONDS))
        try:
            while not self._shutdown.wait(TICK_SECONDS):
                self.state.loop_count += 1
                self.run_once()
                if self.state.loop_count % ticks_per_status == 0:
                    self.publish_state()
        finally:
            self.log.info("Overlay daemon shutting down")
            self.context.close()
            self.state.status = "stopped"
            self.publish_state()


def main() -> int:
    """Entrypoint for ``python -m aerogrid.daemon``."""
    setup_daemon_logging()
    OverlayDaemon().run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
