"""
Value types shared by the store, the coordinator and the renderer.

Everything here is immutable once constructed. A Snapshot is replaced,
never edited.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple


WorkspaceId = str


@dataclass(frozen=True)
class WindowInfo:
    """One application window as reported by aerospace."""

    app_name: str
    window_title: str
    window_id: str


WindowMap = Mapping[WorkspaceId, Tuple[WindowInfo, ...]]

_EMPTY_MAP: WindowMap = MappingProxyType({})


def freeze_windows(mapping: Mapping[WorkspaceId, Iterable[WindowInfo]]) -> WindowMap:
    """Copy a workspace -> windows mapping into a read-only structure."""
    return MappingProxyType({ws: tuple(windows) for ws, windows in mapping.items()})


@dataclass(frozen=True, eq=True, unsafe_hash=False)
class Snapshot:
    """Point-in-time view of the focused workspace and all windows.

    Capture timestamps are None until the field has been published once.
    An absent workspace key means "no known windows". Snapshots compare by
    value but are not hashable.
    """

    __hash__ = None  # type: ignore[assignment]

    current_workspace: Optional[WorkspaceId] = None
    windows_by_workspace: WindowMap = field(default_factory=lambda: _EMPTY_MAP)
    current_workspace_captured_at: Optional[float] = None
    windows_captured_at: Optional[float] = None

    def windows_for(self, workspace: WorkspaceId) -> Tuple[WindowInfo, ...]:
        """Windows on a workspace, matching the id case-insensitively."""
        windows = self.windows_by_workspace.get(workspace)
        if windows is not None:
            return windows
        wanted = workspace.lower()
        for key, value in self.windows_by_workspace.items():
            if key.lower() == wanted:
                return value
        return ()

    def is_current(self, workspace: WorkspaceId) -> bool:
        if self.current_workspace is None:
            return False
        return self.current_workspace.lower() == workspace.lower()

    @property
    def window_count(self) -> int:
        return sum(len(windows) for windows in self.windows_by_workspace.values())

    def to_dict(self) -> Dict:
        return {
            "current_workspace": self.current_workspace,
            "current_workspace_captured_at": self.current_workspace_captured_at,
            "windows_captured_at": self.windows_captured_at,
            "windows_by_workspace": {
                ws: [
                    {"app_name": w.app_name, "window_title": w.window_title, "window_id": w.window_id}
                    for w in windows
                ]
                for ws, windows in self.windows_by_workspace.items()
            },
        }


EMPTY_SNAPSHOT = Snapshot()
