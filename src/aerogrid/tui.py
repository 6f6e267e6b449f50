"""
Textual overlay for aerogrid.

Draws the workspace grid from the snapshot store. The app never waits on
aerospace: it re-reads the store on a short timer and repaints.
"""

from typing import Optional, Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from . import __version__
from .config import OverlayConfig, get_overlay_config
from .context import OverlayContext
from .grid_layout import GridCell, build_grid, is_loading
from .settings import DEFAULT_LAYOUT_ROWS


GRID_REFRESH_SECONDS = 0.5
CELL_CLASSES = ("current", "occupied", "empty", "loading")


class WorkspaceCell(Static):
    """One workspace key with its application list."""

    def __init__(self, workspace_key: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.workspace_key = workspace_key
        self.cell_text = ""

    def show_cell(self, cell: GridCell, loading: bool = False) -> None:
        wanted = cell.css_class(loading)
        for name in CELL_CLASSES:
            self.set_class(name == wanted, name)

        t = Text()
        t.append(cell.key.upper(), style="bold")
        t.append("\n")
        t.append(cell.body_text(loading))
        self.cell_text = t.plain
        self.update(t)


class OverlayApp(App):
    """Workspace grid overlay"""

    CSS_PATH = "tui.tcss"

    BINDINGS = [
        ("escape", "toggle_overlay", "Toggle"),
        ("space", "toggle_overlay", "Toggle"),
        ("r", "force_refresh", "Refresh"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        context: OverlayContext,
        layout_rows: Sequence[Sequence[str]] = DEFAULT_LAYOUT_ROWS,
    ):
        super().__init__()
        self.context = context
        self.layout_rows = layout_rows

    def compose(self) -> ComposeResult:
        with Vertical(id="grid"):
            for row_index, row in enumerate(self.layout_rows):
                with Horizontal(classes="grid-row", id=f"row-{row_index}"):
                    for col_index, key in enumerate(row):
                        yield WorkspaceCell(key, id=f"cell-{row_index}-{col_index}")
        yield Static("Overlay hidden - space to show, q to quit", id="hidden-text")
        yield Static("", id="overlay-status")

    def on_mount(self) -> None:
        self.title = f"aerogrid v{__version__}"
        self.context.show_overlay()
        self.refresh_grid()
        self.set_interval(GRID_REFRESH_SECONDS, self.refresh_grid)

    def refresh_grid(self) -> None:
        """Repaint every cell from the current snapshot."""
        visible = self.context.overlay_visible
        self.query_one("#grid").display = visible
        self.query_one("#hidden-text", Static).display = not visible
        if not visible:
            return

        snapshot = self.context.get_snapshot()
        coordinator = self.context.coordinator
        loading = is_loading(snapshot, coordinator.is_fresh(), coordinator.in_flight)
        for row_index, row in enumerate(build_grid(snapshot, self.layout_rows)):
            for col_index, cell in enumerate(row):
                widget = self.query_one(f"#cell-{row_index}-{col_index}", WorkspaceCell)
                widget.show_cell(cell, loading)

        self.query_one("#overlay-status", Static).update(self._status_line())

    def _status_line(self) -> str:
        status = self.context.status()
        age = status["cache_age_seconds"]
        age_text = "never" if age is None else f"{age:.0f}s ago"
        refreshing = " (refreshing)" if status["refresh_in_flight"] else ""
        return (
            f"workspace {status['current_workspace'] or '?'} | "
            f"{status['window_count']} windows | updated {age_text}{refreshing} | "
            f"push {status['push_listener']} | r:Refresh space:Hide q:Quit"
        )

    def action_toggle_overlay(self) -> None:
        self.context.toggle_overlay()
        self.refresh_grid()

    def action_force_refresh(self) -> None:
        if self.context.coordinator.force_refresh():
            self.notify("Refreshing windows", severity="information")
        else:
            self.notify("Refresh already running", severity="warning")
        self.refresh_grid()

    async def action_quit(self) -> None:
        self.context.hide_overlay()
        self.exit()


def run_tui(config: Optional[OverlayConfig] = None) -> None:
    """Run the overlay with its own context until the user quits."""
    context = OverlayContext(config or get_overlay_config())
    context.start()
    try:
        OverlayApp(context).run()
    finally:
        context.close()
