"""Tests for container and VM connection strategies."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pveconnect.core.connector import (
    ConnectMethod,
    ConnectState,
    ContainerConnector,
    VMConnector,
    extract_ip_addresses,
    has_serial_console,
    is_usable_address,
    select_guest_ip,
)
from pveconnect.core.exceptions import InvalidUsernameError, NoConnectionMethodError
from pveconnect.models.resource import Resource

VM_CONFIG_WITH_SERIAL = """boot: order=scsi0
cores: 2
memory: 2048
name: web-01
serial0: socket
vga: serial0
"""

VM_CONFIG_WITHOUT_SERIAL = """boot: order=scsi0
cores: 2
memory: 2048
name: web-01
vga: std
"""


class TestGuestAddressSelection:
    """Tests for extracting the guest address from agent output."""

    def test_extract_in_document_order(self, agent_interfaces_output: str) -> None:
        assert extract_ip_addresses(agent_interfaces_output) == [
            "127.0.0.1",
            "::1",
            "fe80::be24:11ff:fe5e:a017",
            "10.0.0.5",
        ]

    def test_select_skips_loopback_and_link_local(self) -> None:
        output = (
            '{"ip-address": "127.0.0.1"}, {"ip-address": "fe80::1"}, '
            '{"ip-address": "10.0.0.5"}'
        )
        assert select_guest_ip(output) == "10.0.0.5"

    def test_select_first_usable(self) -> None:
        output = '"ip-address": "192.168.1.20", "ip-address": "10.0.0.5"'
        assert select_guest_ip(output) == "192.168.1.20"

    def test_select_global_ipv6(self) -> None:
        output = '"ip-address": "::1", "ip-address": "2001:db8::10"'
        assert select_guest_ip(output) == "2001:db8::10"

    def test_select_none_usable(self) -> None:
        output = '"ip-address": "127.0.0.1", "ip-address": "::1", "ip-address": "fe80::2"'
        assert select_guest_ip(output) is None

    def test_select_no_addresses(self) -> None:
        assert select_guest_ip("[]") is None

    @pytest.mark.parametrize(
        ("address", "usable"),
        [
            ("10.0.0.5", True),
            ("127.0.1.1", False),
            ("::1", False),
            ("fe80::1", False),
            ("FE80::1", False),
            ("", False),
            ("2001:db8::1", True),
        ],
    )
    def test_is_usable_address(self, address: str, usable: bool) -> None:
        assert is_usable_address(address) is usable


class TestSerialDetection:
    """Tests for has_serial_console."""

    def test_serial_present(self) -> None:
        assert has_serial_console(VM_CONFIG_WITH_SERIAL) is True

    def test_serial_absent(self) -> None:
        assert has_serial_console(VM_CONFIG_WITHOUT_SERIAL) is False

    def test_serial_must_start_line(self) -> None:
        assert has_serial_console("description: uses serial0: socket\n") is False


class TestContainerConnector:
    """Tests for ContainerConnector."""

    def test_connect_enters_container(
        self, fake_runner, sample_container: Resource
    ) -> None:
        runner = fake_runner({})

        ContainerConnector(runner).connect(sample_container)

        runner.handoff.assert_called_once_with(["pct", "enter", "200"])
        runner.run.assert_not_called()

    def test_plan(self, fake_runner, sample_container: Resource) -> None:
        plan = ContainerConnector(fake_runner({}), pct="/usr/sbin/pct").plan(sample_container)

        assert plan.method is ConnectMethod.SHELL
        assert plan.command == ["/usr/sbin/pct", "enter", "200"]


class TestVMConnector:
    """Tests for the VM connection state machine."""

    @pytest.fixture
    def ask_username(self) -> MagicMock:
        return MagicMock(return_value="admin")

    def test_ssh_via_guest_agent(
        self,
        fake_runner,
        make_result,
        agent_interfaces_output: str,
        ask_username: MagicMock,
        sample_vm: Resource,
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    agent_interfaces_output
                ),
            }
        )

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.SSH
        assert plan.address == "10.0.0.5"
        assert plan.command == ["ssh", "admin@10.0.0.5"]
        assert plan.states == [
            ConnectState.PROBE_AGENT,
            ConnectState.AGENT_OK,
            ConnectState.IP_FOUND,
            ConnectState.SSH_LAUNCHED,
        ]
        ask_username.assert_called_once_with("root")

    def test_blank_username_defaults_to_root(
        self, fake_runner, make_result, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    '"ip-address" : "10.0.0.5"'
                ),
            }
        )

        plan = VMConnector(runner, ask_username=lambda _default: "  ").plan(sample_vm)

        assert plan.command == ["ssh", "root@10.0.0.5"]

    def test_configured_default_user(
        self, fake_runner, make_result, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    '"ip-address" : "10.0.0.5"'
                ),
            }
        )

        plan = VMConnector(
            runner, ask_username=lambda _default: "", default_user="debian"
        ).plan(sample_vm)

        assert plan.command == ["ssh", "debian@10.0.0.5"]

    @pytest.mark.parametrize(
        "username",
        ["-oProxyCommand=touch /tmp/x", "-lroot", "admin@other", "a b"],
    )
    def test_rejects_username_ssh_would_misread(
        self, fake_runner, make_result, sample_vm: Resource, username: str
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    '"ip-address" : "10.0.0.5"'
                ),
            }
        )
        connector = VMConnector(runner, ask_username=lambda _default: username)

        with pytest.raises(InvalidUsernameError) as exc_info:
            connector.connect(sample_vm)

        assert exc_info.value.username == username.strip()
        runner.handoff.assert_not_called()

    def test_no_usable_ip_falls_back_to_serial(
        self,
        fake_runner,
        make_result,
        ask_username: MagicMock,
        sample_vm: Resource,
    ) -> None:
        """Test an empty address set goes to serial without asking for a user."""
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    '"ip-address" : "127.0.0.1", "ip-address" : "fe80::1"'
                ),
                ("qm", "config", "100"): make_result(VM_CONFIG_WITH_SERIAL),
            }
        )

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.SERIAL
        assert plan.command == ["qm", "terminal", "100"]
        assert plan.states == [
            ConnectState.PROBE_AGENT,
            ConnectState.AGENT_OK,
            ConnectState.NO_IP_FOUND,
            ConnectState.PROBE_SERIAL,
            ConnectState.SERIAL_LAUNCHED,
        ]
        ask_username.assert_not_called()

    def test_interface_query_failure_falls_back(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(exit_code=255),
                ("qm", "config", "100"): make_result(VM_CONFIG_WITH_SERIAL),
            }
        )

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.SERIAL
        assert ConnectState.NO_IP_FOUND in plan.states
        ask_username.assert_not_called()

    def test_agent_unavailable_falls_back_to_serial(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(
                    exit_code=255, stderr="QEMU guest agent is not running"
                ),
                ("qm", "config", "100"): make_result(VM_CONFIG_WITH_SERIAL),
            }
        )

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.SERIAL
        assert plan.states[:3] == [
            ConnectState.PROBE_AGENT,
            ConnectState.AGENT_UNAVAILABLE,
            ConnectState.PROBE_SERIAL,
        ]
        commands = [c.args[0] for c in runner.run.call_args_list]
        assert ["qm", "agent", "100", "network-get-interfaces"] not in commands

    def test_no_method(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(exit_code=2),
                ("qm", "config", "100"): make_result(VM_CONFIG_WITHOUT_SERIAL),
            }
        )

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.NONE
        assert plan.available is False
        assert plan.command == []
        assert plan.states[-1] is ConnectState.NO_METHOD

    def test_config_failure_means_no_serial(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner({("qm", "agent", "100", "ping"): make_result(exit_code=2)})

        plan = VMConnector(runner, ask_username).plan(sample_vm)

        assert plan.method is ConnectMethod.NONE

    def test_connect_hands_off_ssh(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(),
                ("qm", "agent", "100", "network-get-interfaces"): make_result(
                    '"ip-address" : "10.0.0.5"'
                ),
            }
        )

        VMConnector(runner, ask_username, ssh="/usr/bin/ssh").connect(sample_vm)

        runner.handoff.assert_called_once_with(["/usr/bin/ssh", "admin@10.0.0.5"])

    def test_connect_no_method_raises_without_handoff(
        self, fake_runner, make_result, ask_username: MagicMock, sample_vm: Resource
    ) -> None:
        runner = fake_runner(
            {
                ("qm", "agent", "100", "ping"): make_result(exit_code=2),
                ("qm", "config", "100"): make_result(VM_CONFIG_WITHOUT_SERIAL),
            }
        )

        with pytest.raises(NoConnectionMethodError) as exc_info:
            VMConnector(runner, ask_username).connect(sample_vm)

        message = str(exc_info.value)
        assert "qemu-guest-agent" in message
        assert "serial console" in message
        runner.handoff.assert_not_called()
