"""
Tests for the overlay daemon loop pieces.

run() itself installs signal handlers and blocks, so it is exercised in
a thread with shutdown requested from the test.
"""

import threading
import time
from unittest.mock import MagicMock

from aerogrid.config import OverlayConfig
from aerogrid.context import OverlayContext
from aerogrid.daemon import OverlayDaemon, consume_toggle_signal
from aerogrid.daemon_state import OverlayDaemonState
from aerogrid.settings import signal_toggle

from tests.fixtures import FakeClock, aerospace_runner


QUIET = OverlayConfig(push_enabled=False, file_watch_enabled=False, status_interval=0.25)


def _daemon(tmp_path):
    context = OverlayContext(QUIET, runner=aerospace_runner(), clock=FakeClock())
    return OverlayDaemon(
        QUIET,
        context=context,
        state_path=tmp_path / "daemon_state.json",
        signal_path=tmp_path / "toggle.signal",
    )


class TestConsumeToggleSignal:
    """Tests for the toggle signal file."""

    def test_no_signal(self, tmp_path):
        assert consume_toggle_signal(tmp_path / "toggle.signal") is False

    def test_signal_consumed_once(self, tmp_path):
        path = tmp_path / "toggle.signal"
        path.touch()
        assert consume_toggle_signal(path) is True
        assert not path.exists()
        assert consume_toggle_signal(path) is False

    def test_default_path_matches_cli_signal(self):
        signal_toggle()
        assert consume_toggle_signal() is True


class TestRunOnce:
    """Tests for a single loop iteration."""

    def test_toggle_signal_shows_then_hides(self, tmp_path):
        daemon = _daemon(tmp_path)
        daemon.signal_path.touch()
        daemon.run_once()
        assert daemon.context.overlay_visible is True

        daemon.signal_path.touch()
        daemon.run_once()
        assert daemon.context.overlay_visible is False
        daemon.context.coordinator.wait_idle(5)

    def test_no_signal_no_change(self, tmp_path):
        daemon = _daemon(tmp_path)
        daemon.context = MagicMock()
        daemon.run_once()
        daemon.context.toggle_overlay.assert_not_called()


class TestPublishState:
    """Tests for writing the status file."""

    def test_writes_context_status(self, tmp_path):
        daemon = _daemon(tmp_path)
        daemon.context.coordinator.force_refresh()
        daemon.context.coordinator.wait_idle(5)
        daemon.publish_state()

        state = OverlayDaemonState.load(daemon.state_path)
        assert state.context["current_workspace"] == "A"
        assert state.context["window_count"] == 2
        assert "A" in state.snapshot["windows_by_workspace"]
        assert state.last_update is not None


class TestRun:
    """Tests for the full loop."""

    def test_run_until_shutdown(self, tmp_path, monkeypatch):
        daemon = _daemon(tmp_path)
        # signal.signal only works on the main thread
        monkeypatch.setattr("aerogrid.daemon.signal.signal", MagicMock())

        thread = threading.Thread(target=daemon.run)
        thread.start()
        try:
            for _ in range(100):
                state = OverlayDaemonState.load(daemon.state_path)
                if state is not None and state.status == "running":
                    break
                time.sleep(0.05)
            assert state.status == "running"
        finally:
            daemon.request_shutdown()
            thread.join(5)

        assert not thread.is_alive()
        final = OverlayDaemonState.load(daemon.state_path)
        assert final.status == "stopped"
