"""Core functionality for pveconnect.

This module contains the core logic including configuration management,
host command execution, inventory parsing, and connection strategies.
"""

from pveconnect.core.config import Config, ConfigManager
from pveconnect.core.connector import (
    ConnectionPlan,
    ConnectMethod,
    ConnectState,
    ContainerConnector,
    VMConnector,
)
from pveconnect.core.exceptions import (
    ConfigurationError,
    InvalidResourceIdError,
    InventoryError,
    NoConnectionMethodError,
    PveConnectError,
)
from pveconnect.core.inventory import Inventory, InventoryFetcher
from pveconnect.core.runner import CommandResult, CommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Config",
    "ConfigManager",
    "ConfigurationError",
    "ConnectMethod",
    "ConnectState",
    "ConnectionPlan",
    "ContainerConnector",
    "Inventory",
    "InventoryError",
    "InventoryFetcher",
    "InvalidResourceIdError",
    "NoConnectionMethodError",
    "PveConnectError",
    "VMConnector",
]
