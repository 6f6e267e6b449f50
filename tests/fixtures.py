"""
Test fixtures and factories for aerogrid unit tests.

Fake clocks and a scripted command runner make timing and aerospace
behaviour deterministic without a real window manager.
"""

import threading
from typing import Dict, List, Optional, Sequence, Tuple

from aerogrid.aerospace_queries import FOCUSED_WORKSPACE_ARGS, all_windows_args
from aerogrid.command_runner import CommandResult
from aerogrid.models import Snapshot, WindowInfo, freeze_windows


SAMPLE_WINDOWS_OUTPUT = "A|Chrome|Gmail|1001\nB|Slack|Standup|2002\n"


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self.now

    def advance(self, seconds: float) -> float:
        with self._lock:
            self.now += seconds
            return self.now


class FakeRunner:
    """Stands in for CommandRunner.

    Responses are keyed by the argument tuple; unknown commands fail.
    Set ``gate`` to block every run until the test releases it.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], CommandResult]] = None):
        self.responses: Dict[Tuple[str, ...], CommandResult] = dict(responses or {})
        self.calls: List[Tuple[str, ...]] = []
        self.gate: Optional[threading.Event] = None
        self.started = threading.Event()
        self._lock = threading.Lock()

    def set(self, args: Sequence[str], result: CommandResult) -> None:
        self.responses[tuple(args)] = result

    def run(self, args: Sequence[str]) -> CommandResult:
        with self._lock:
            self.calls.append(tuple(args))
        self.started.set()
        if self.gate is not None:
            self.gate.wait(5)
        return self.responses.get(tuple(args), CommandResult.failure("no scripted response"))

    def count(self, args: Sequence[str]) -> int:
        with self._lock:
            return self.calls.count(tuple(args))


def aerospace_runner(
    workspace: Optional[str] = "A",
    windows: Optional[str] = SAMPLE_WINDOWS_OUTPUT,
) -> FakeRunner:
    """A runner answering the focused and all-windows queries.

    Pass None to make that query fail.
    """
    runner = FakeRunner()
    if workspace is not None:
        runner.set(FOCUSED_WORKSPACE_ARGS, CommandResult.success(workspace + "\n"))
    if windows is not None:
        runner.set(all_windows_args(), CommandResult.success(windows))
    return runner


def make_snapshot(
    current: Optional[str] = None,
    windows: Optional[Dict[str, List[Tuple[str, str]]]] = None,
    current_at: Optional[float] = None,
    windows_at: Optional[float] = None,
) -> Snapshot:
    """Build a Snapshot from {workspace: [(app, title), ...]}."""
    mapping = {
        ws: [WindowInfo(app, title, str(i)) for i, (app, title) in enumerate(entries, start=1)]
        for ws, entries in (windows or {}).items()
    }
    return Snapshot(
        current_workspace=current,
        windows_by_workspace=freeze_windows(mapping),
        current_workspace_captured_at=current_at,
        windows_captured_at=windows_at,
    )
