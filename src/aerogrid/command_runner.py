"""
Runs the aerospace CLI.

Every invocation has a timeout and returns a CommandResult; nothing here
raises on a failed command. A non-zero exit status, a timeout, a missing
binary and empty output are all failures.
"""

import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import CommandError
from .logging_config import get_logger


log = get_logger("command_runner")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command invocation."""

    ok: bool
    stdout: str = ""
    error: Optional[CommandError] = None
    duration: float = 0.0

    @classmethod
    def success(cls, stdout: str, duration: float = 0.0) -> "CommandResult":
        return cls(ok=True, stdout=stdout, duration=duration)

    @classmethod
    def failure(cls, message: str, returncode: Optional[int] = None, duration: float = 0.0) -> "CommandResult":
        return cls(ok=False, error=CommandError(message, returncode), duration=duration)


class CommandRunner:
    """Invokes the aerospace binary with a fixed timeout."""

    def __init__(self, binary: str = "aerospace", timeout: float = 5.0):
        self.binary = binary
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> CommandResult:
        """Run ``binary *args`` and capture stdout.

        Args:
            args: Arguments passed straight to the binary (no shell)

        Returns:
            CommandResult with stdout on success, or the failure reason
        """
        cmd: List[str] = [self.binary, *args]
        start = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult.failure(
                f"timed out after {self.timeout:g}s", duration=time.monotonic() - start
            )
        except (OSError, subprocess.SubprocessError) as e:
            return CommandResult.failure(f"could not run {self.binary}: {e}")

        duration = time.monotonic() - start
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            return CommandResult.failure(
                f"exit status {result.returncode}" + (f": {stderr}" if stderr else ""),
                returncode=result.returncode,
                duration=duration,
            )
        if not result.stdout.strip():
            return CommandResult.failure("empty output", returncode=0, duration=duration)

        log.debug("%s finished in %.3fs", " ".join(cmd), duration)
        return CommandResult.success(result.stdout, duration=duration)
