"""
Pure grid-building logic for the overlay.

No Textual imports here, so the layout can be tested without an app.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .models import Snapshot
from .settings import DEFAULT_LAYOUT_ROWS


MAX_APP_NAME = 12
TRUNCATED_APP_NAME = 9
EMPTY_CELL_TEXT = "No apps"
LOADING_TEXT = "Loading..."


@dataclass(frozen=True)
class GridCell:
    """One workspace key on the grid."""

    key: str
    apps: Tuple[str, ...] = ()
    is_current: bool = False

    @property
    def has_apps(self) -> bool:
        return bool(self.apps)

    def css_class(self, loading: bool = False) -> str:
        if loading:
            return "loading"
        if self.is_current:
            return "current"
        if self.apps:
            return "occupied"
        return "empty"

    def body_text(self, loading: bool = False) -> str:
        if loading:
            return LOADING_TEXT
        if not self.apps:
            return EMPTY_CELL_TEXT
        return "\n".join(self.apps)


def format_app_name(name: str) -> str:
    """Truncate long application names to fit a cell."""
    if len(name) > MAX_APP_NAME:
        return name[:TRUNCATED_APP_NAME] + "..."
    return name


def build_grid(
    snapshot: Snapshot,
    layout_rows: Sequence[Sequence[str]] = DEFAULT_LAYOUT_ROWS,
) -> List[List[GridCell]]:
    """Lay the snapshot out on the keyboard grid, one cell per key."""
    grid = []
    for row in layout_rows:
        cells = []
        for key in row:
            apps = tuple(format_app_name(w.app_name) for w in snapshot.windows_for(key))
            cells.append(GridCell(key=key, apps=apps, is_current=snapshot.is_current(key)))
        grid.append(cells)
    return grid


def is_loading(snapshot: Snapshot, cache_fresh: bool, refresh_in_flight: bool) -> bool:
    """Show the loading state only while a refresh replaces stale or missing data."""
    stale = not cache_fresh or not snapshot.windows_by_workspace
    return stale and refresh_in_flight
