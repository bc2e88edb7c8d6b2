"""
User-facing output for AudioFlow.

Messages go through Loguru to the log file and are echoed on a shared Rich
console, styled by level. Background threads flagged ``silent_logging`` only
write to the log.
"""

import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"

LEVEL_STYLES = {
    "debug": "cyan",
    "info": None,
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}

_console: Optional[Console] = None


def get_console() -> Console:
    """Shared console for tables, spinners and echoed log messages."""
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def setup_loguru(
    log_file: Path, level: str = "INFO", console_output: bool = False
) -> None:
    """
    Configure loguru with a rotating file sink and an optional stderr sink.

    Args:
        log_file: Path to log file
        level: Minimum level for logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also write log records to stderr
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,
        level=level,
        format=LOG_FORMAT,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.debug(f"Logging to {log_file} (level={level})")


def log(message: str, level: str = "info") -> None:
    """
    Log a user-facing message and echo it on the console.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    # depth=1 attributes the record to the caller, not this helper
    logger.opt(depth=1).log(level.upper(), message)

    if getattr(threading.current_thread(), "silent_logging", False):
        return
    get_console().print(message, style=LEVEL_STYLES.get(level))
