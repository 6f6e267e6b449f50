"""
File Watch Fallback - secondary channel for workspace changes.

Watches the parent directory of the workspace state file (so the file may
appear after startup) using watchfiles, and publishes its first line on
every change. Read failures are expected (file briefly missing, partial
write) and only logged; the watch keeps running.
"""

import threading
import time
from pathlib import Path
from typing import Callable, Optional

import watchfiles

from .aerospace_queries import first_line
from .errors import ChannelError
from .logging_config import get_logger
from .settings import OVERLAY
from .snapshot_store import SnapshotStore


log = get_logger("file_watch")


def read_workspace_file(path: Path) -> Optional[str]:
    """First line of the state file, trimmed, or None if unreadable or blank."""
    try:
        with open(path, encoding="utf-8") as f:
            return first_line(f.readline())
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Could not read %s: %s", path, e)
        return None


class FileWatchFallback:
    """Publishes the workspace id written to a state file."""

    def __init__(
        self,
        store: SnapshotStore,
        path: str = OVERLAY.workspace_file,
        clock: Callable[[], float] = time.monotonic,
        debounce_ms: int = 50,
    ):
        self.store = store
        self.path = Path(path)
        self.debounce_ms = debounce_ms
        self.disabled = False
        self._clock = clock
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread.

        Raises:
            ChannelError: if the directory holding the file doesn't exist
        """
        if self.is_running:
            return
        directory = self.path.parent
        if not directory.is_dir():
            self.disabled = True
            raise ChannelError("file_watch", f"directory {directory} does not exist")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="FileWatchThread", daemon=True
        )
        self._thread.start()
        log.info("Watching %s", self.path)

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None

    def seed(self) -> bool:
        """Publish whatever the file holds right now, if anything."""
        return self.handle_change()

    def handle_change(self) -> bool:
        """Read the file and publish its workspace id. Returns whether it applied."""
        workspace = read_workspace_file(self.path)
        if workspace is None:
            return False
        applied = self.store.publish_current_workspace(workspace, self._clock())
        if applied:
            log.info("Current workspace from file: %s", workspace)
        return applied

    def _is_our_file(self, change: watchfiles.Change, path: str) -> bool:
        return change != watchfiles.Change.deleted and Path(path).name == self.path.name

    def _run(self) -> None:
        try:
            for _changes in watchfiles.watch(
                self.path.parent,
                watch_filter=self._is_our_file,
                stop_event=self._stop_event,
                debounce=self.debounce_ms,
                recursive=False,
                raise_interrupt=False,
            ):
                self.handle_change()
        except Exception as e:
            self.disabled = True
            log.error("File watch on %s stopped: %s", self.path, e)
