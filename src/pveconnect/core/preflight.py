"""Startup checks for the local Proxmox VE environment."""

from __future__ import annotations

import os
import shutil

from pveconnect.core.exceptions import PermissionDeniedError, ToolNotFoundError
from pveconnect.utils.logging import get_logger

logger = get_logger("preflight")


def check_privileges() -> None:
    """Fail fast unless running as root.

    Raises:
        PermissionDeniedError: If the effective uid is not 0.
    """
    euid = os.geteuid()
    if euid != 0:
        raise PermissionDeniedError(euid)


def check_tools(tools: list[str]) -> None:
    """Ensure every host tool can be located.

    Args:
        tools: Command names or paths.

    Raises:
        ToolNotFoundError: For the first tool that cannot be found.
    """
    for tool in tools:
        path = shutil.which(tool)
        if path is None:
            raise ToolNotFoundError(tool)
        logger.debug(f"Using {tool} at {path}")


def run_preflight(tools: list[str], require_root: bool = True) -> None:
    """Run all startup checks.

    Args:
        tools: Host tools that must be available.
        require_root: Whether to enforce root privileges.
    """
    if require_root:
        check_privileges()
    check_tools(tools)
