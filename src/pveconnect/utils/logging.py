"""Logging setup for pveconnect.

Log records go to the stderr Rich console so they never interleave with
the resource table and prompts on stdout. The configured ``logging.level``
is the floor; each ``-v`` flag can only make output chattier:

    -v   INFO
    -vv  DEBUG, including the exit code and stderr of failed probes
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from pveconnect.utils.output import error_console

VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

FILE_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(verbosity: int = 0, configured: str = "WARNING") -> int:
    """Combine the configured level with the ``-v`` count.

    Args:
        verbosity: Number of -v flags.
        configured: Level name from the config file.

    Returns:
        The more verbose of the two levels.
    """
    configured_level = logging.getLevelNamesMapping().get(configured.upper(), logging.WARNING)
    flag_level = VERBOSITY_LEVELS[min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)]
    return min(configured_level, flag_level)


def configure_logging(
    verbosity: int = 0,
    level: str = "WARNING",
    log_file: str | Path | None = None,
) -> None:
    """Attach console and optional file handlers to the ``pveconnect`` logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        verbosity: Number of -v flags from the CLI.
        level: Configured console level name.
        log_file: Optional path of a file that receives every record.
    """
    root_logger = logging.getLogger("pveconnect")
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=error_console,
        show_path=False,
        show_time=verbosity >= 2,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(resolve_level(verbosity, level))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a child of the ``pveconnect`` logger, e.g. ``get_logger("runner")``."""
    return logging.getLogger(f"pveconnect.{name}")
