"""
Snapshot Store - the single shared view of workspace state.

Readers get the current Snapshot without locking. Writers go through the
two publish methods, which compare capture timestamps per field and swap
in a new immutable Snapshot. A publish carrying an older (or equal)
timestamp than the stored one for its field is dropped, so updates apply
in capture order no matter in which order they arrive.
"""

import threading
from dataclasses import replace
from typing import Iterable, Mapping, Optional

from .logging_config import get_logger
from .models import EMPTY_SNAPSHOT, Snapshot, WindowInfo, WorkspaceId, freeze_windows


log = get_logger("snapshot_store")


def _is_newer(captured_at: float, stored: Optional[float]) -> bool:
    return stored is None or captured_at > stored


class SnapshotStore:
    """Holds the latest Snapshot and applies field-level publishes."""

    def __init__(self, initial: Snapshot = EMPTY_SNAPSHOT):
        self._snapshot = initial
        # Guards the compare-and-swap only; reads never take it
        self._swap_lock = threading.Lock()

    def get_snapshot(self) -> Snapshot:
        """Return the latest published Snapshot. Never blocks."""
        return self._snapshot

    def publish_current_workspace(self, workspace_id: WorkspaceId, captured_at: float) -> bool:
        """Replace the focused workspace if this capture is newer.

        Returns:
            True if the snapshot was replaced, False for a stale capture
        """
        with self._swap_lock:
            current = self._snapshot
            if not _is_newer(captured_at, current.current_workspace_captured_at):
                log.debug(
                    "Dropped stale workspace %r (captured %.3f <= %s)",
                    workspace_id, captured_at, current.current_workspace_captured_at,
                )
                return False
            self._snapshot = replace(
                current,
                current_workspace=workspace_id,
                current_workspace_captured_at=captured_at,
            )
        return True

    def publish_windows(
        self,
        mapping: Mapping[WorkspaceId, Iterable[WindowInfo]],
        captured_at: float,
    ) -> bool:
        """Replace the workspace -> windows map if this capture is newer.

        The focused workspace is left untouched.
        """
        frozen = freeze_windows(mapping)
        with self._swap_lock:
            current = self._snapshot
            if not _is_newer(captured_at, current.windows_captured_at):
                log.debug(
                    "Dropped stale window map (captured %.3f <= %s)",
                    captured_at, current.windows_captured_at,
                )
                return False
            self._snapshot = replace(
                current,
                windows_by_workspace=frozen,
                windows_captured_at=captured_at,
            )
        return True
