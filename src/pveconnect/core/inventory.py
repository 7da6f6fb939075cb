"""Inventory of the VMs and containers on the local Proxmox VE host.

This module runs the two listing tools, parses their tabular output
into Resource objects, and resolves an operator-entered id to a
resource.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pveconnect.core.exceptions import InventoryError, InvalidResourceIdError
from pveconnect.core.runner import CommandRunner
from pveconnect.models.resource import (
    CT_LIST_LAYOUT,
    VM_LIST_LAYOUT,
    ColumnLayout,
    Resource,
    ResourceKind,
)
from pveconnect.utils.logging import get_logger

logger = get_logger("inventory")


def _data_rows(blob: str) -> list[list[str]]:
    """Split listing output into whitespace-delimited rows, header skipped."""
    lines = blob.splitlines()[1:]
    return [line.split() for line in lines if line.strip()]


def parse_listing(blob: str, kind: ResourceKind, layout: ColumnLayout) -> list[Resource]:
    """Parse the tabular output of a listing tool.

    Args:
        blob: Raw output, including its header line.
        kind: Kind of resource the listing describes.
        layout: Column positions of the listing.

    Returns:
        Resources in listing order. Rows that cannot be parsed are
        skipped.
    """
    resources: list[Resource] = []

    for fields in _data_rows(blob):
        if len(fields) < 3:
            logger.warning(f"Skipping short {kind.value} listing row: {' '.join(fields)}")
            continue
        try:
            resources.append(Resource.from_row(fields, kind, layout))
        except (ValueError, IndexError) as e:
            logger.warning(f"Skipping unparsable {kind.value} listing row {fields!r}: {e}")

    return resources


@dataclass
class Inventory:
    """Snapshot of one ``qm list`` and one ``pct list`` run.

    Args:
        vm_output: Raw ``qm list`` output.
        ct_output: Raw ``pct list`` output.
    """

    vm_output: str
    ct_output: str
    vms: list[Resource] = field(init=False)
    containers: list[Resource] = field(init=False)

    def __post_init__(self) -> None:
        self.vms = parse_listing(self.vm_output, ResourceKind.VM, VM_LIST_LAYOUT)
        self.containers = parse_listing(
            self.ct_output, ResourceKind.CONTAINER, CT_LIST_LAYOUT
        )

    @property
    def resources(self) -> list[Resource]:
        """All resources, VMs first, each kind in listing order."""
        return self.vms + self.containers

    def classify(self, resource_id: str) -> ResourceKind | None:
        """Determine which listing an id belongs to.

        The id matches a listing when it equals the first token of one
        of its data rows. VMs take precedence over containers.

        Args:
            resource_id: Id as entered by the operator.

        Returns:
            The matching kind, or None if neither listing has the id.
        """
        wanted = resource_id.strip()
        if not wanted:
            return None

        for kind, blob in (
            (ResourceKind.VM, self.vm_output),
            (ResourceKind.CONTAINER, self.ct_output),
        ):
            if any(fields[0] == wanted for fields in _data_rows(blob)):
                return kind
        return None

    def find(self, resource_id: str) -> Resource:
        """Resolve an operator-entered id to a listed resource.

        Args:
            resource_id: Id as entered by the operator.

        Returns:
            The matching Resource.

        Raises:
            InvalidResourceIdError: If no VM or container has this id.
        """
        kind = self.classify(resource_id)
        if kind is not None:
            candidates = self.vms if kind is ResourceKind.VM else self.containers
            wanted = resource_id.strip()
            for resource in candidates:
                if str(resource.id) == wanted:
                    return resource

        raise InvalidResourceIdError(resource_id.strip())


class InventoryFetcher:
    """Fetches the host's inventory using the listing tools.

    Args:
        runner: Command runner used to execute the tools.
        qm: Name or path of the VM manager.
        pct: Name or path of the container toolkit.

    Example:
        >>> fetcher = InventoryFetcher(CommandRunner())
        >>> inventory = fetcher.fetch()
        >>> [r.id for r in inventory.resources]
        [100, 101, 200]
    """

    def __init__(self, runner: CommandRunner, qm: str = "qm", pct: str = "pct") -> None:
        self.runner = runner
        self.qm = qm
        self.pct = pct

    def _list(self, tool: str) -> str:
        result = self.runner.run([tool, "list"])
        if not result.success:
            logger.debug(f"{tool} list stderr: {result.stderr}")
            raise InventoryError(f"{tool} list", result.exit_code, result.stderr)
        return result.stdout

    def fetch(self) -> Inventory:
        """Run both listing tools.

        Returns:
            Inventory built from the two outputs.

        Raises:
            InventoryError: If either listing tool exits non-zero.
        """
        vm_output = self._list(self.qm)
        ct_output = self._list(self.pct)

        inventory = Inventory(vm_output=vm_output, ct_output=ct_output)
        logger.info(
            f"Found {len(inventory.vms)} VMs and {len(inventory.containers)} containers"
        )
        return inventory
