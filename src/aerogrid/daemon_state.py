"""
Daemon state file.

The daemon writes its status here so `aerogrid status` can show it from
another process. It is only a report: nothing reads it back into the
snapshot store.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .settings import get_daemon_state_path


@dataclass
class OverlayDaemonState:
    """Status snapshot of a running overlay daemon."""

    pid: int = 0
    status: str = "starting"  # starting, running, stopped
    started_at: Optional[datetime] = None
    last_update: Optional[datetime] = None
    loop_count: int = 0
    context: dict = field(default_factory=dict)
    snapshot: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert state to dictionary for JSON serialization."""
        return {
            "pid": self.pid,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "loop_count": self.loop_count,
            "context": self.context,
            "snapshot": self.snapshot,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OverlayDaemonState":
        """Create state from dictionary."""
        state = cls()
        state.pid = data.get("pid", 0)
        state.status = data.get("status", "unknown")
        state.loop_count = data.get("loop_count", 0)
        state.context = data.get("context") or {}
        state.snapshot = data.get("snapshot") or {}

        if data.get("started_at"):
            state.started_at = datetime.fromisoformat(data["started_at"])
        if data.get("last_update"):
            state.last_update = datetime.fromisoformat(data["last_update"])

        return state

    def save(self, state_file: Optional[Path] = None) -> None:
        """Save state atomically (write then rename).

        Args:
            state_file: Optional path override (for testing)
        """
        path = state_file or get_daemon_state_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        tmp.replace(path)

    @classmethod
    def load(cls, state_file: Optional[Path] = None) -> Optional["OverlayDaemonState"]:
        """Load state from file.

        Returns:
            OverlayDaemonState if the file exists and is valid, None otherwise
        """
        path = state_file or get_daemon_state_path()
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = json.load(f)
            return cls.from_dict(data)
        except (json.JSONDecodeError, KeyError, ValueError, AttributeError, OSError):
            return None


def get_daemon_state() -> Optional[OverlayDaemonState]:
    """Read the daemon's last published status, if any."""
    return OverlayDaemonState.load()
