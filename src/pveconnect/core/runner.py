"""Local command execution for the Proxmox VE host tools.

This module provides the two ways pveconnect talks to host tools:
- ``CommandRunner.run`` executes a command and captures its output
- ``CommandRunner.handoff`` replaces the current process with an
  interactive command and never returns
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import NoReturn

from pveconnect.core.exceptions import PveConnectError
from pveconnect.utils.logging import get_logger
from pveconnect.utils.output import print_info

logger = get_logger("runner")

# Exit status a shell reports for a command it cannot find
EXIT_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Result from a command execution.

    Args:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        exit_code: Exit code of the command.
        command: The argv that was executed.

    Attributes:
        success: True if exit code is 0.
    """

    stdout: str
    stderr: str
    exit_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Check if command succeeded (exit code 0)."""
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


class CommandRunner:
    """Runs host tools, either capturing output or handing off the terminal.

    Commands run synchronously with no timeout: a hung tool blocks the
    caller until it exits or the operator interrupts it.

    Args:
        dry_run: If True, ``handoff`` prints the command instead of
            executing it. Captured commands still run.

    Example:
        >>> runner = CommandRunner()
        >>> result = runner.run(["qm", "list"])
        >>> if result.success:
        ...     print(result.stdout)
        >>> runner.handoff(["pct", "enter", "200"])  # does not return
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def run(self, command: list[str]) -> CommandResult:
        """Execute a command and capture its output.

        A command that cannot be started is reported the way a shell
        would, as exit code 127, so callers only ever inspect the result.

        Args:
            command: Argv to execute.

        Returns:
            CommandResult with command output and exit code.
        """
        logger.debug(f"Executing: {shlex.join(command)}")

        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            logger.warning(f"Command not found: {command[0]}")
            return CommandResult(
                stdout="",
                stderr=str(e),
                exit_code=EXIT_NOT_FOUND,
                command=list(command),
            )

        result = CommandResult(
            stdout=proc.stdout.strip(),
            stderr=proc.stderr.strip(),
            exit_code=proc.returncode,
            command=list(command),
        )

        if result.success:
            logger.debug(f"Command succeeded: {result.command_line}")
        else:
            logger.debug(
                f"Command failed with exit code {result.exit_code}: "
                f"{result.command_line}: {result.stderr}"
            )

        return result

    def handoff(self, command: list[str]) -> NoReturn:
        """Transfer control of the terminal to an interactive command.

        The current process image is replaced, so this never returns.
        In dry-run mode the command is printed and the process exits 0.

        Args:
            command: Argv of the interactive command.

        Raises:
            PveConnectError: If the command cannot be executed.
        """
        if self.dry_run:
            print_info(f"[DRY RUN] Would execute: {shlex.join(command)}")
            raise SystemExit(0)

        logger.info(f"Handing off terminal to: {shlex.join(command)}")
        sys.stdout.flush()
        sys.stderr.flush()

        try:
            os.execvp(command[0], command)
        except OSError as e:
            raise PveConnectError(
                f"Failed to execute {command[0]}: {e.strerror or e}",
                details={"command": shlex.join(command)},
            ) from e
