"""
Error taxonomy for aerogrid.

None of these reach the renderer. They are produced inside a component,
logged at its boundary and turned into a result value or a disabled channel.
"""

from typing import Optional


class AerogridError(Exception):
    """Base class for aerogrid errors."""


class CommandError(AerogridError):
    """Transport failure: non-zero exit, timeout, missing binary or empty output."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class ParseError(AerogridError):
    """A single malformed record in command output."""

    def __init__(self, message: str, line_number: int, line: str):
        super().__init__(f"line {line_number}: {message}: {line!r}")
        self.line_number = line_number
        self.line = line


class ChannelError(AerogridError):
    """An update channel could not be set up (bind or watch failure)."""

    def __init__(self, channel: str, message: str):
        super().__init__(f"{channel}: {message}")
        self.channel = channel
