"""CLI module for pveconnect.

This package contains the Click command definition for the pveconnect CLI.
"""

from pveconnect.cli.main import cli, main

__all__ = ["cli", "main"]
