"""pveconnect - connect to the VMs and containers of a Proxmox VE host.

This package lists the guests managed by ``qm`` and ``pct`` on the local
Proxmox VE host and opens an interactive session to the one the operator
picks: ``pct enter`` for containers, SSH via the QEMU guest agent or the
serial console for VMs.

Example:
    $ pveconnect
    $ pveconnect --dry-run -v
"""

__version__ = "0.1.0"

from pveconnect.core.exceptions import (
    ConfigurationError,
    InvalidResourceIdError,
    InvalidUsernameError,
    InventoryError,
    NoConnectionMethodError,
    PermissionDeniedError,
    PveConnectError,
    ToolNotFoundError,
)

__all__ = [
    "ConfigurationError",
    "InvalidResourceIdError",
    "InvalidUsernameError",
    "InventoryError",
    "NoConnectionMethodError",
    "PermissionDeniedError",
    "PveConnectError",
    "ToolNotFoundError",
    "__version__",
]
