"""
The two logical aerospace queries and parsers for their output.

Parsing is pure and never raises: malformed records are collected as
ParseError values and skipped, the rest of the batch is kept.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ParseError
from .models import WindowInfo, WorkspaceId


FIELD_DELIMITER = "|"

FOCUSED_WORKSPACE_ARGS = ("list-workspaces", "--focused", "--format", "%{workspace}")

ALL_WINDOWS_FORMAT = "%{workspace}|%{app-name}|%{window-title}|%{window-id}"
WORKSPACE_WINDOWS_FORMAT = "%{app-name}|%{window-title}|%{window-id}"


def all_windows_args() -> tuple:
    return ("list-windows", "--all", "--format", ALL_WINDOWS_FORMAT)


def workspace_windows_args(workspace: WorkspaceId) -> tuple:
    return ("list-windows", "--workspace", workspace, "--format", WORKSPACE_WINDOWS_FORMAT)


@dataclass
class ParsedWindows:
    """Result of parsing a windows query."""

    mapping: Dict[WorkspaceId, List[WindowInfo]] = field(default_factory=dict)
    errors: List[ParseError] = field(default_factory=list)

    @property
    def window_count(self) -> int:
        return sum(len(w) for w in self.mapping.values())

    def merge(self, other: "ParsedWindows") -> None:
        for workspace, windows in other.mapping.items():
            self.mapping.setdefault(workspace, []).extend(windows)
        self.errors.extend(other.errors)


def first_line(text: Optional[str]) -> Optional[str]:
    """First line of text with surrounding whitespace trimmed, or None if blank."""
    lines = (text or "").splitlines()
    if not lines:
        return None
    return lines[0].strip() or None


def parse_focused_workspace(stdout: str) -> Optional[WorkspaceId]:
    """Parse the focused-workspace query: one line holding the workspace id."""
    return first_line(stdout)


def _split_window_fields(line: str, leading: int) -> Optional[List[str]]:
    """Split a record into ``leading`` fields, a title and a window id.

    The title is the only field allowed to contain the delimiter; it is
    whatever sits between the leading fields and the trailing window id.
    """
    parts = line.split(FIELD_DELIMITER)
    if len(parts) < leading + 2:
        return None
    head = [p.strip() for p in parts[:leading]]
    title = FIELD_DELIMITER.join(parts[leading:-1]).strip()
    window_id = parts[-1].strip()
    return head + [title, window_id]


def parse_all_windows(stdout: str) -> ParsedWindows:
    """Parse ``workspace|app|title|window-id`` records, one per line.

    Records keep their order within each workspace.
    """
    parsed = ParsedWindows()
    for number, raw in enumerate(stdout.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        fields_ = _split_window_fields(line, leading=2)
        if fields_ is None:
            parsed.errors.append(ParseError("expected 4 fields", number, line))
            continue
        workspace, app_name, title, window_id = fields_
        if not workspace or not app_name:
            parsed.errors.append(ParseError("empty workspace or application", number, line))
            continue
        parsed.mapping.setdefault(workspace, []).append(
            WindowInfo(app_name=app_name, window_title=title, window_id=window_id)
        )
    return parsed


def parse_workspace_windows(workspace: WorkspaceId, stdout: str) -> ParsedWindows:
    """Parse ``app|title|window-id`` records for a single workspace."""
    parsed = ParsedWindows()
    for number, raw in enumerate(stdout.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        fields_ = _split_window_fields(line, leading=1)
        if fields_ is None or not fields_[0]:
            parsed.errors.append(ParseError("expected 3 fields", number, line))
            continue
        app_name, title, window_id = fields_
        parsed.mapping.setdefault(workspace, []).append(
            WindowInfo(app_name=app_name, window_title=title, window_id=window_id)
        )
    return parsed
