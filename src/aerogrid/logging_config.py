"""
Logging setup for aerogrid.

All loggers live under the ``aerogrid`` namespace. Console output goes
through Rich when it is available; the daemon also logs to a file.
"""

import logging
from pathlib import Path
from typing import Optional

from .settings import get_daemon_log_path


ROOT_LOGGER_NAME = "aerogrid"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return the ``aerogrid.<name>`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _console_handler(rich_console: bool) -> logging.Handler:
    if rich_console:
        try:
            from rich.logging import RichHandler
            return RichHandler(show_path=False, rich_tracebacks=True, markup=False)
        except ImportError:
            pass
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the ``aerogrid`` root logger.

    Existing handlers are removed so repeated calls don't duplicate output.

    Args:
        level: Logging level for the aerogrid namespace
        log_file: Optional file to append to (parent dirs are created)
        console: Whether to log to the console
        rich_console: Use Rich formatting for console output when available

    Returns:
        The configured root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    if console:
        logger.addHandler(_console_handler(rich_console))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def setup_daemon_logging(
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """File plus console logging for the overlay daemon."""
    setup_logging(
        level=level,
        log_file=log_file or get_daemon_log_path(),
        console=console,
    )
    return get_logger("daemon")


def setup_cli_logging(verbose: bool = False) -> logging.Logger:
    """Console-only logging for one-shot CLI commands."""
    return setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
