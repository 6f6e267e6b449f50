"""
CLI interface for aerogrid using Typer.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

# Main app
app = typer.Typer(
    name="aerogrid",
    help="Workspace overlay for the AeroSpace window manager",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()

VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Show debug logging")
]


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context):
    """Run the overlay daemon when no command is given."""
    if ctx.invoked_subcommand is None:
        daemon()


@app.command()
def daemon():
    """Run the headless overlay daemon (push listener, file watch, refresh)."""
    from .daemon import OverlayDaemon
    from .logging_config import setup_daemon_logging
    from .settings import get_daemon_log_path

    setup_daemon_logging()
    rprint(f"[dim]Starting overlay daemon, logging to {get_daemon_log_path()}[/dim]")
    OverlayDaemon().run()


@app.command()
def tui():
    """Show the workspace grid in the terminal."""
    from .logging_config import setup_logging
    from .settings import get_daemon_log_path
    from .tui import run_tui

    # The TUI owns the terminal; log to file only
    setup_logging(log_file=get_daemon_log_path().with_name("tui.log"), console=False)
    run_tui()


@app.command()
def status():
    """Show the running daemon's cache and channel status."""
    from .config import get_overlay_config
    from .daemon_state import get_daemon_state

    state = get_daemon_state()
    if state is None:
        rprint("[dim]No daemon status found. Start one with 'aerogrid daemon'[/dim]")
        raise typer.Exit(1)

    stale_after = get_overlay_config().status_interval * 3
    age = (datetime.now() - state.last_update).total_seconds() if state.last_update else None
    if state.status == "stopped":
        status_text = "[red]stopped[/red]"
    elif age is None or age > stale_after:
        status_text = "[yellow]not responding[/yellow]"
    else:
        status_text = f"[green]{state.status}[/green]"

    table = Table(title="aerogrid daemon", show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Status", status_text)
    table.add_row("PID", str(state.pid))
    if state.started_at:
        table.add_row("Started", state.started_at.strftime("%Y-%m-%d %H:%M:%S"))
    if age is not None:
        table.add_row("Last update", f"{age:.0f}s ago")
    for key, value in state.context.items():
        table.add_row(key.replace("_", " ").capitalize(), _format_value(value))
    console.print(table)


def _format_value(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


@app.command()
def toggle():
    """Flip the running daemon's overlay-open state (for hotkeys).

    The daemon is headless: opening requests a refresh and pauses polling,
    but nothing is drawn. Use `aerogrid tui` for a visible grid.
    """
    from .settings import signal_toggle

    signal_toggle()
    rprint("[dim]Toggle signal sent[/dim]")


@app.command()
def snapshot(
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the snapshot as JSON")
    ] = False,
    timeout: Annotated[
        float, typer.Option("--timeout", "-t", help="Seconds to wait for aerospace")
    ] = 10.0,
    verbose: VerboseOption = False,
):
    """Query aerospace once and print every workspace's windows."""
    from .config import get_overlay_config
    from .context import OverlayContext
    from .logging_config import setup_cli_logging

    setup_cli_logging(verbose)
    context = OverlayContext(get_overlay_config())
    context.coordinator.force_refresh()
    if not context.coordinator.wait_idle(timeout):
        rprint(f"[red]Timed out after {timeout:g}s waiting for aerospace[/red]")
        raise typer.Exit(1)

    outcome = context.coordinator.last_outcome
    snap = context.get_snapshot()
    if as_json:
        print(json.dumps(snap.to_dict(), indent=2))
    else:
        table = Table(title=f"Current workspace: {snap.current_workspace or 'unknown'}")
        table.add_column("Workspace", style="bold")
        table.add_column("App")
        table.add_column("Title", overflow="ellipsis")
        table.add_column("ID", style="dim")
        for workspace, windows in sorted(snap.windows_by_workspace.items()):
            for window in windows:
                table.add_row(workspace, window.app_name, window.window_title, window.window_id)
        console.print(table)

    if outcome is None or not outcome.ok:
        error = outcome.error if outcome else "no result"
        rprint(f"[red]Window query failed:[/red] {error}")
        raise typer.Exit(1)


@app.command("setup-hint")
def setup_hint_cmd():
    """Print the aerospace.toml line that feeds the push listener."""
    from .config import get_overlay_config
    from .push_listener import setup_hint

    config = get_overlay_config()
    rprint("[bold]Add to ~/.aerospace.toml:[/bold]\n")
    print(
        setup_hint(
            port=config.push_port,
            host=config.push_host,
            path=config.push_path,
            workspace_file=config.workspace_file if config.file_watch_enabled else None,
        )
    )


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show current configuration (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config file")
    ] = False,
):
    """Create a config file with documented defaults."""
    from . import config as config_module

    path = config_module.CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists() and not force:
        rprint(f"[yellow]Config file already exists:[/yellow] {path}")
        rprint("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    path.write_text(config_module.DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]✓[/green] Created config file: [bold]{path}[/bold]")


@config_app.command("show")
def config_show():
    """Show the effective configuration (file merged over defaults)."""
    _config_show()


def _config_show():
    from dataclasses import asdict

    from . import config as config_module

    path = config_module.CONFIG_PATH
    if path.exists():
        rprint(f"[bold]Configuration[/bold] ({path}):\n")
    else:
        rprint(f"[dim]No config file found at {path}, showing defaults[/dim]\n")

    for key, value in asdict(config_module.get_overlay_config()).items():
        if isinstance(value, list):
            value = " ".join(value)
        rprint(f"  {key}: {value}")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
