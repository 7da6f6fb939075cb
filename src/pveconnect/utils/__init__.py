"""Utility modules for pveconnect.

This package contains shared utilities for logging and output formatting.
"""

from pveconnect.utils.logging import configure_logging, get_logger
from pveconnect.utils.output import OutputFormatter, console

__all__ = [
    "OutputFormatter",
    "configure_logging",
    "console",
    "get_logger",
]
