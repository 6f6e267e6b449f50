"""
Unit tests for aerospace query arguments and output parsing.
"""

from aerogrid.aerospace_queries import (
    ALL_WINDOWS_FORMAT,
    FOCUSED_WORKSPACE_ARGS,
    ParsedWindows,
    all_windows_args,
    first_line,
    parse_all_windows,
    parse_focused_workspace,
    parse_workspace_windows,
    workspace_windows_args,
)
from aerogrid.errors import ParseError
from aerogrid.models import WindowInfo


class TestQueryArguments:
    """Test the argument vectors passed to aerospace"""

    def test_focused_workspace(self):
        assert FOCUSED_WORKSPACE_ARGS == (
            "list-workspaces", "--focused", "--format", "%{workspace}",
        )

    def test_all_windows(self):
        assert all_windows_args() == ("list-windows", "--all", "--format", ALL_WINDOWS_FORMAT)
        assert ALL_WINDOWS_FORMAT == "%{workspace}|%{app-name}|%{window-title}|%{window-id}"

    def test_single_workspace(self):
        args = workspace_windows_args("q")
        assert args[:3] == ("list-windows", "--workspace", "q")
        assert args[-1] == "%{app-name}|%{window-title}|%{window-id}"


class TestFirstLine:
    """Test first-line extraction shared by every workspace source"""

    def test_trims_whitespace(self):
        assert first_line("  A  \n") == "A"

    def test_only_first_line(self):
        assert first_line("B\nC\n") == "B"

    def test_blank_is_none(self):
        assert first_line("") is None
        assert first_line("   \n") is None
        assert first_line(None) is None


class TestParseFocusedWorkspace:
    """Test parsing of the focused workspace query"""

    def test_plain_id(self):
        assert parse_focused_workspace("3\n") == "3"

    def test_empty_output(self):
        assert parse_focused_workspace("\n") is None


class TestParseAllWindows:
    """Test parsing of workspace|app|title|id records"""

    def test_example_output(self):
        parsed = parse_all_windows("A|Chrome|Gmail|1001\nB|Slack|Standup|2002")
        assert parsed.errors == []
        assert parsed.mapping == {
            "A": [WindowInfo("Chrome", "Gmail", "1001")],
            "B": [WindowInfo("Slack", "Standup", "2002")],
        }
        assert parsed.window_count == 2

    def test_keeps_order_within_workspace(self):
        parsed = parse_all_windows("1|Zed|a|1\n1|Arc|b|2\n1|Mail|c|3\n")
        assert [w.app_name for w in parsed.mapping["1"]] == ["Zed", "Arc", "Mail"]

    def test_malformed_line_is_skipped(self):
        """A record with too few fields is dropped and the rest kept"""
        parsed = parse_all_windows("A|Chrome|Gmail|1001\ngarbage\nB|Slack|Standup|2002")
        assert set(parsed.mapping) == {"A", "B"}
        assert len(parsed.errors) == 1
        error = parsed.errors[0]
        assert isinstance(error, ParseError)
        assert error.line_number == 2
        assert error.line == "garbage"

    def test_three_fields_is_malformed(self):
        parsed = parse_all_windows("A|Chrome|1001")
        assert parsed.mapping == {}
        assert len(parsed.errors) == 1

    def test_title_may_contain_delimiter(self):
        parsed = parse_all_windows("A|Chrome|Mail | Inbox|1001")
        assert parsed.mapping["A"] == [WindowInfo("Chrome", "Mail | Inbox", "1001")]

    def test_empty_title_allowed(self):
        parsed = parse_all_windows("A|Finder||42")
        assert parsed.mapping["A"] == [WindowInfo("Finder", "", "42")]

    def test_empty_workspace_or_app_is_malformed(self):
        parsed = parse_all_windows("|Chrome|Gmail|1\nA||Gmail|2")
        assert parsed.mapping == {}
        assert [e.line_number for e in parsed.errors] == [1, 2]

    def test_blank_lines_ignored(self):
        parsed = parse_all_windows("\nA|Chrome|Gmail|1001\n\n")
        assert parsed.errors == []
        assert parsed.window_count == 1

    def test_fields_trimmed(self):
        parsed = parse_all_windows(" A | Chrome | Gmail | 1001 ")
        assert parsed.mapping == {"A": [WindowInfo("Chrome", "Gmail", "1001")]}

    def test_empty_output(self):
        parsed = parse_all_windows("")
        assert parsed.mapping == {}
        assert parsed.errors == []


class TestParseWorkspaceWindows:
    """Test parsing of app|title|id records for one workspace"""

    def test_records_assigned_to_workspace(self):
        parsed = parse_workspace_windows("q", "Chrome|Gmail|1001\nSlack|Standup|2002\n")
        assert parsed.mapping == {
            "q": [WindowInfo("Chrome", "Gmail", "1001"), WindowInfo("Slack", "Standup", "2002")],
        }

    def test_malformed_record(self):
        parsed = parse_workspace_windows("q", "Chrome\n|Gmail|1")
        assert parsed.mapping == {}
        assert len(parsed.errors) == 2


class TestParsedWindowsMerge:
    """Test combining per-workspace results"""

    def test_merge_combines_mappings_and_errors(self):
        combined = ParsedWindows()
        combined.merge(parse_workspace_windows("1", "Zed|a|1"))
        combined.merge(parse_workspace_windows("2", "Arc|b|2\nbad"))
        assert set(combined.mapping) == {"1", "2"}
        assert combined.window_count == 2
        assert len(combined.errors) == 1
