"""
Settings and path management for aerogrid.

Defaults live in frozen dataclasses so every component reads the same
values. User overrides come from config.py (~/.aerogrid/config.yaml).

The state directory can be redirected with AEROGRID_STATE_DIR, which the
tests use to keep daemons away from the user's home directory.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


# QWERTY keyboard layout, one workspace per key
DEFAULT_LAYOUT_ROWS: Tuple[Tuple[str, ...], ...] = (
    ("1", "2", "3", "4", "5", "6", "7", "8", "9", "0"),
    ("q", "w", "e", "r", "t", "y", "u", "i", "o", "p"),
    ("a", "s", "d", "f", "g", "h", "j", "k", "l", ";"),
    ("z", "x", "c", "v", "b", "n", "m", ",", ".", "/"),
)


@dataclass(frozen=True)
class OverlayDefaults:
    """Timing and channel defaults (seconds unless noted)."""

    cache_ttl: float = 10.0             # Skip non-forced refreshes this long after a fetch
    poll_interval: float = 60.0         # Background refresh timer period
    active_window: float = 300.0        # Poll only if the user acted this recently
    idle_threshold: float = 60.0        # ...and not idle for longer than this
    command_timeout: float = 5.0        # Per aerospace invocation
    status_interval: float = 5.0        # Daemon status file write period
    push_host: str = "127.0.0.1"
    push_port: int = 18901
    push_path: str = "/workspace-change"
    workspace_file: str = "/tmp/aerospace-current-workspace"
    aerospace_bin: str = "/opt/homebrew/bin/aerospace"
    refresh_on_demand_only: bool = True
    refresh_on_workspace_change: bool = False
    windows_query_mode: str = "all"     # "all" or "per-workspace"


@dataclass(frozen=True)
class Paths:
    """Static locations under the user's home directory."""

    home: Path = field(default_factory=lambda: Path.home() / ".aerogrid")

    @property
    def config(self) -> Path:
        return self.home / "config.yaml"


OVERLAY = OverlayDefaults()
PATHS = Paths()


def get_state_dir() -> Path:
    """Directory for daemon state, logs and signal files."""
    override = os.environ.get("AEROGRID_STATE_DIR")
    if override:
        return Path(override)
    return PATHS.home


def ensure_state_dir() -> Path:
    state_dir = get_state_dir()
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir


def get_daemon_state_path() -> Path:
    return get_state_dir() / "daemon_state.json"


def get_daemon_log_path() -> Path:
    return get_state_dir() / "daemon.log"


def get_toggle_signal_path() -> Path:
    return get_state_dir() / "toggle.signal"


def signal_toggle() -> None:
    """Ask a running daemon to toggle the overlay.

    The daemon consumes the file on its next tick.
    """
    ensure_state_dir()
    get_toggle_signal_path().touch()


def resolve_aerospace_bin(configured: str) -> str:
    """Prefer the configured binary, fall back to whatever is on PATH."""
    if Path(configured).is_file():
        return configured
    found = shutil.which("aerospace")
    return found or configured


def default_workspace_names() -> List[str]:
    """Workspace names queried one by one in per-workspace mode."""
    return [key for row in DEFAULT_LAYOUT_ROWS for key in row]
