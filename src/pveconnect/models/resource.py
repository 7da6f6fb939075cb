"""Resource models for pveconnect.

This module defines the data models for the virtual machines and
containers reported by the Proxmox VE listing tools.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(str, Enum):
    """Kinds of guests a Proxmox VE host manages."""

    VM = "VM"
    CONTAINER = "CT"

    @property
    def color(self) -> str:
        """Rich color for this kind.

        Returns:
            Color name for Rich console output.
        """
        return "cyan" if self is ResourceKind.VM else "magenta"


class ColumnLayout(BaseModel):
    """Column positions of one listing command's tabular output.

    Positions are indexes into a whitespace-split row; negative values
    count from the end of the row.

    Args:
        id: Position of the VMID column.
        name: Position of the name column.
        status: Position of the status column.
    """

    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: int
    status: int


# VMID NAME STATUS MEM(MB) BOOTDISK(GB) PID
VM_LIST_LAYOUT = ColumnLayout(id=0, name=1, status=2)

# VMID Status Lock Name; Lock is blank unless the container is locked
CT_LIST_LAYOUT = ColumnLayout(id=0, status=1, name=-1)


def status_color(status: str) -> str:
    """Rich color for a listing status string."""
    colors = {
        "running": "green",
        "stopped": "red",
        "paused": "yellow",
        "suspended": "blue",
    }
    return colors.get(status.lower(), "dim")


class Resource(BaseModel):
    """A VM or container as reported by ``qm list`` or ``pct list``.

    Args:
        id: Numeric VMID, unique within its kind at listing time.
        kind: Whether this is a VM or a container.
        name: Guest name.
        status: Status column as printed by the listing tool.

    Example:
        >>> ct = Resource(id=200, kind=ResourceKind.CONTAINER, name="dns", status="running")
        >>> ct.kind.value
        'CT'
    """

    id: Annotated[int, Field(ge=0, description="VMID")]
    kind: ResourceKind = Field(description="VM or container")
    name: str = Field(default="", description="Guest name")
    status: str = Field(default="unknown", description="Listing status")

    @property
    def is_vm(self) -> bool:
        return self.kind is ResourceKind.VM

    @classmethod
    def from_row(cls, fields: list[str], kind: ResourceKind, layout: ColumnLayout) -> Resource:
        """Create a Resource from a whitespace-split listing row.

        Args:
            fields: Row split on whitespace.
            kind: Kind of the listing the row came from.
            layout: Column positions for that listing.

        Returns:
            Resource populated from the row.

        Raises:
            ValueError: If the id column is not an integer.
            IndexError: If the row is too short for the layout.
        """
        return cls(
            id=int(fields[layout.id]),
            kind=kind,
            name=fields[layout.name],
            status=fields[layout.status],
        )
