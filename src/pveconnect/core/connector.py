"""Connection strategies for containers and VMs.

Containers are entered with ``pct enter``. VMs are reached over SSH at
the address reported by the QEMU guest agent, falling back to the
serial console when the agent cannot supply one:

    PROBE_AGENT -> AGENT_OK | AGENT_UNAVAILABLE
    AGENT_OK -> IP_FOUND | NO_IP_FOUND
    IP_FOUND -> SSH_LAUNCHED
    NO_IP_FOUND | AGENT_UNAVAILABLE -> PROBE_SERIAL
    PROBE_SERIAL -> SERIAL_LAUNCHED | NO_METHOD

Every probe failure means "unavailable"; the failing command's exit
code and stderr are only logged.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import NoReturn

from pveconnect.core.config import is_valid_username
from pveconnect.core.exceptions import InvalidUsernameError, NoConnectionMethodError
from pveconnect.core.runner import CommandResult, CommandRunner
from pveconnect.models.resource import Resource
from pveconnect.utils.logging import get_logger
from pveconnect.utils.output import create_spinner_progress, print_info, print_warning

logger = get_logger("connector")

_IP_ADDRESS_RE = re.compile(r'"ip-address"\s*:\s*"([^"]*)"')

_EXCLUDED_PREFIXES = ("127.", "fe80:")
_EXCLUDED_ADDRESSES = frozenset({"::1"})


class ConnectState(str, Enum):
    """States of the VM connection state machine."""

    PROBE_AGENT = "probe_agent"
    AGENT_OK = "agent_ok"
    AGENT_UNAVAILABLE = "agent_unavailable"
    IP_FOUND = "ip_found"
    NO_IP_FOUND = "no_ip_found"
    PROBE_SERIAL = "probe_serial"
    SSH_LAUNCHED = "ssh_launched"
    SERIAL_LAUNCHED = "serial_launched"
    NO_METHOD = "no_method"


class ConnectMethod(str, Enum):
    """How a session to a resource is established."""

    SHELL = "shell"
    SSH = "ssh"
    SERIAL = "serial"
    NONE = "none"


@dataclass
class ConnectionPlan:
    """Resolved way of reaching a resource.

    Args:
        resource: The resource to connect to.
        method: Connection method chosen.
        command: Argv to hand the terminal to (empty for NONE).
        address: Guest address, for SSH.
        states: States visited while resolving, in order.
    """

    resource: Resource
    method: ConnectMethod
    command: list[str] = field(default_factory=list)
    address: str | None = None
    states: list[ConnectState] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.method is not ConnectMethod.NONE


def extract_ip_addresses(agent_output: str) -> list[str]:
    """Extract every quoted ``ip-address`` value, in document order.

    Args:
        agent_output: Output of ``qm agent <id> network-get-interfaces``.

    Returns:
        All addresses found, unfiltered.
    """
    return _IP_ADDRESS_RE.findall(agent_output)


def is_usable_address(address: str) -> bool:
    """Check that an address is neither loopback nor IPv6 link-local."""
    lowered = address.lower()
    if not lowered or lowered in _EXCLUDED_ADDRESSES:
        return False
    return not lowered.startswith(_EXCLUDED_PREFIXES)


def select_guest_ip(agent_output: str) -> str | None:
    """Pick the first usable address from guest agent output.

    Example:
        >>> select_guest_ip('"ip-address": "127.0.0.1", "ip-address": "10.0.0.5"')
        '10.0.0.5'
    """
    for address in extract_ip_addresses(agent_output):
        if is_usable_address(address):
            return address
    return None


def has_serial_console(vm_config: str) -> bool:
    """Check ``qm config`` output for a ``serial0:`` entry."""
    return any(line.startswith("serial0:") for line in vm_config.splitlines())


class ContainerConnector:
    """Enters LXC containers with ``pct enter``.

    Args:
        runner: Command runner used for the hand-off.
        pct: Name or path of the container toolkit.
    """

    def __init__(self, runner: CommandRunner, pct: str = "pct") -> None:
        self.runner = runner
        self.pct = pct

    def plan(self, resource: Resource) -> ConnectionPlan:
        return ConnectionPlan(
            resource=resource,
            method=ConnectMethod.SHELL,
            command=[self.pct, "enter", str(resource.id)],
        )

    def connect(self, resource: Resource) -> NoReturn:
        """Hand the terminal to a shell inside the container."""
        plan = self.plan(resource)
        print_info(f"Connecting to LXC container {resource.id}...")
        self.runner.handoff(plan.command)


class VMConnector:
    """Reaches QEMU VMs over SSH or the serial console.

    Args:
        runner: Command runner for probes and the hand-off.
        ask_username: Callback prompting for the guest username; it
            receives the default and returns the chosen name. Only
            called once an address has been found.
        qm: Name or path of the VM manager.
        ssh: Name or path of the SSH client.
        default_user: Username used when the prompt is left blank.
        show_progress: Show a spinner while the guest agent is queried.

    Example:
        >>> connector = VMConnector(CommandRunner(), ask_username=lambda d: d)
        >>> plan = connector.plan(vm)
        >>> plan.method, plan.command
        (<ConnectMethod.SSH: 'ssh'>, ['ssh', 'root@10.0.0.5'])
    """

    def __init__(
        self,
        runner: CommandRunner,
        ask_username: Callable[[str], str],
        qm: str = "qm",
        ssh: str = "ssh",
        default_user: str = "root",
        show_progress: bool = False,
    ) -> None:
        self.runner = runner
        self.ask_username = ask_username
        self.qm = qm
        self.ssh = ssh
        self.default_user = default_user
        self.show_progress = show_progress

    def _agent(self, vmid: int, *args: str) -> CommandResult:
        command = [self.qm, "agent", str(vmid), *args]
        if not self.show_progress:
            return self.runner.run(command)

        progress = create_spinner_progress()
        with progress:
            task = progress.add_task(f"Querying guest agent of VM {vmid}...", total=None)
            result = self.runner.run(command)
            progress.update(task, completed=True)
        return result

    def _discover_address(self, vmid: int, states: list[ConnectState]) -> str | None:
        states.append(ConnectState.PROBE_AGENT)
        ping = self._agent(vmid, "ping")
        if not ping.success:
            logger.debug(
                f"Guest agent ping for VM {vmid} exited {ping.exit_code}: {ping.stderr}"
            )
            states.append(ConnectState.AGENT_UNAVAILABLE)
            print_warning("QEMU guest agent not available.")
            return None

        states.append(ConnectState.AGENT_OK)
        interfaces = self._agent(vmid, "network-get-interfaces")
        address = None
        if interfaces.success:
            address = select_guest_ip(interfaces.stdout)
        else:
            logger.debug(
                f"Interface query for VM {vmid} exited {interfaces.exit_code}: "
                f"{interfaces.stderr}"
            )

        if address is None:
            states.append(ConnectState.NO_IP_FOUND)
            print_warning("No suitable IP address found via guest agent.")
            return None

        states.append(ConnectState.IP_FOUND)
        logger.info(f"Guest agent reported {address} for VM {vmid}")
        return address

    def _serial_available(self, vmid: int) -> bool:
        result = self.runner.run([self.qm, "config", str(vmid)])
        if not result.success:
            logger.debug(
                f"qm config for VM {vmid} exited {result.exit_code}: {result.stderr}"
            )
            return False
        return has_serial_console(result.stdout)

    def plan(self, resource: Resource) -> ConnectionPlan:
        """Run the probes and decide how to reach a VM.

        Prompts for the guest username only when SSH will be used.

        Args:
            resource: The VM to reach.

        Returns:
            ConnectionPlan; its method is NONE when neither path works.

        Raises:
            InvalidUsernameError: If the entered username starts with ``-``
                or contains ``@`` or whitespace.
        """
        vmid = resource.id
        states: list[ConnectState] = []

        address = self._discover_address(vmid, states)
        if address is not None:
            user = self.ask_username(self.default_user).strip() or self.default_user
            if not is_valid_username(user):
                raise InvalidUsernameError(user)
            states.append(ConnectState.SSH_LAUNCHED)
            return ConnectionPlan(
                resource=resource,
                method=ConnectMethod.SSH,
                command=[self.ssh, f"{user}@{address}"],
                address=address,
                states=states,
            )

        states.append(ConnectState.PROBE_SERIAL)
        if self._serial_available(vmid):
            states.append(ConnectState.SERIAL_LAUNCHED)
            return ConnectionPlan(
                resource=resource,
                method=ConnectMethod.SERIAL,
                command=[self.qm, "terminal", str(vmid)],
                states=states,
            )

        states.append(ConnectState.NO_METHOD)
        return ConnectionPlan(resource=resource, method=ConnectMethod.NONE, states=states)

    def connect(self, resource: Resource) -> NoReturn:
        """Hand the terminal to an SSH or serial session with the VM.

        Raises:
            NoConnectionMethodError: If neither SSH nor serial is possible.
        """
        plan = self.plan(resource)

        if plan.method is ConnectMethod.SSH:
            print_info(f"Connecting to VM {resource.id} at {plan.address} via SSH...")
        elif plan.method is ConnectMethod.SERIAL:
            print_info("Connecting via serial terminal...")
        else:
            raise NoConnectionMethodError(resource.id)

        self.runner.handoff(plan.command)
