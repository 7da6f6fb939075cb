"""Custom exceptions for pveconnect.

This module defines a hierarchy of exceptions used throughout pveconnect
to provide meaningful error messages and enable proper error handling.

Exception Hierarchy:
    PveConnectError (base)
    ├── ConfigurationError
    │   └── ConfigNotFoundError
    ├── PreflightError
    │   ├── PermissionDeniedError
    │   └── ToolNotFoundError
    ├── InventoryError
    ├── InvalidResourceIdError
    ├── InvalidUsernameError
    └── NoConnectionMethodError
"""

from __future__ import annotations

from typing import Any


class PveConnectError(Exception):
    """Base exception for all pveconnect errors.

    Args:
        message: Human-readable error message.
        details: Optional dictionary with additional error context.

    Attributes:
        message: The error message.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(PveConnectError):
    """Raised when there is a configuration-related error.

    Examples:
        - Invalid YAML syntax in config file
        - Unknown or invalid configuration values
    """


class ConfigNotFoundError(ConfigurationError):
    """Raised when the configuration file cannot be found.

    Args:
        path: The path where the config was expected.
    """

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Configuration file not found: {path}",
            details={"path": path},
        )
        self.path = path


class PreflightError(PveConnectError):
    """Raised when the host environment cannot run pveconnect."""


class PermissionDeniedError(PreflightError):
    """Raised when the process lacks the privileges the host tools need.

    Args:
        euid: Effective user id of the current process.
    """

    def __init__(self, euid: int) -> None:
        super().__init__(
            "Insufficient privileges: qm and pct must be run as root",
            details={"euid": euid},
        )
        self.euid = euid


class ToolNotFoundError(PreflightError):
    """Raised when a required host tool is not on PATH.

    Args:
        tool: The command that could not be located.
    """

    def __init__(self, tool: str) -> None:
        super().__init__(
            f"Command '{tool}' not found. Is this a Proxmox VE host?",
            details={"tool": tool},
        )
        self.tool = tool


class InventoryError(PveConnectError):
    """Raised when a listing command fails.

    Args:
        command: The listing command that failed (e.g., 'qm list').
        exit_code: Exit code returned by the command.
        stderr: Captured standard error, if any.
    """

    def __init__(self, command: str, exit_code: int, stderr: str = "") -> None:
        super().__init__(
            f"Unable to run {command}. Check permissions.",
            details={"exit_code": exit_code},
        )
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class InvalidResourceIdError(PveConnectError):
    """Raised when the selected id matches no VM or container.

    Args:
        resource_id: The text the operator entered.
    """

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Invalid ID: '{resource_id}'")
        self.resource_id = resource_id


class InvalidUsernameError(PveConnectError):
    """Raised when the SSH username cannot be used as the user part of user@host.

    Args:
        username: The text the operator entered.
    """

    def __init__(self, username: str) -> None:
        super().__init__(f"Invalid username: '{username}'")
        self.username = username


class NoConnectionMethodError(PveConnectError):
    """Raised when a VM offers neither a guest agent address nor a serial console.

    Args:
        vmid: Id of the VM.
    """

    def __init__(self, vmid: int) -> None:
        super().__init__(
            f"No connection method available for VM {vmid}. Ensure "
            "qemu-guest-agent is installed and running in the VM, "
            "or enable a serial console (qm set <ID> -serial0 socket)."
        )
        self.vmid = vmid
