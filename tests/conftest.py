"""Pytest configuration and fixtures for pveconnect tests.

This module provides shared fixtures for testing pveconnect components
including sample listing output, guest agent output, configuration
files, and a fake command runner.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
import yaml

from pveconnect.core.runner import CommandResult, CommandRunner
from pveconnect.models.resource import Resource, ResourceKind

if TYPE_CHECKING:
    from collections.abc import Generator

    from click.testing import CliRunner

ResultFactory = Callable[..., CommandResult]
RunnerFactory = Callable[[dict[tuple[str, ...], CommandResult]], MagicMock]


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Close and drop handlers attached by configure_logging."""
    yield
    package_logger = logging.getLogger("pveconnect")
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()


@pytest.fixture
def qm_list_output() -> str:
    """Sample output of 'qm list'."""
    return (
        "      VMID NAME                 STATUS     MEM(MB)    BOOTDISK(GB) PID\n"
        "       100 web-01               running    2048              32.00 4121\n"
        "       101 db-01                stopped    4096              64.00 0\n"
        "       102 build-runner         running    8192             128.00 5310\n"
    )


@pytest.fixture
def pct_list_output() -> str:
    """Sample output of 'pct list'; container 201 is locked."""
    return (
        "VMID       Status     Lock         Name\n"
        "200        running                 dns\n"
        "201        stopped    backup       proxy\n"
    )


@pytest.fixture
def agent_interfaces_output() -> str:
    """Sample output of 'qm agent <id> network-get-interfaces'."""
    return """[
   {
      "hardware-address" : "00:00:00:00:00:00",
      "ip-addresses" : [
         {
            "ip-address" : "127.0.0.1",
            "ip-address-type" : "ipv4",
            "prefix" : 8
         },
         {
            "ip-address" : "::1",
            "ip-address-type" : "ipv6",
            "prefix" : 128
         }
      ],
      "name" : "lo"
   },
   {
      "hardware-address" : "bc:24:11:5e:a0:17",
      "ip-addresses" : [
         {
            "ip-address" : "fe80::be24:11ff:fe5e:a017",
            "ip-address-type" : "ipv6",
            "prefix" : 64
         },
         {
            "ip-address" : "10.0.0.5",
            "ip-address-type" : "ipv4",
            "prefix" : 24
         }
      ],
      "name" : "eth0"
   }
]"""


@pytest.fixture
def sample_vm() -> Resource:
    """Create a sample VM resource."""
    return Resource(id=100, kind=ResourceKind.VM, name="web-01", status="running")


@pytest.fixture
def sample_container() -> Resource:
    """Create a sample container resource."""
    return Resource(id=200, kind=ResourceKind.CONTAINER, name="dns", status="running")


@pytest.fixture
def make_result() -> ResultFactory:
    """Factory for CommandResult objects."""

    def _make(stdout: str = "", exit_code: int = 0, stderr: str = "") -> CommandResult:
        return CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code, command=[])

    return _make


@pytest.fixture
def fake_runner() -> RunnerFactory:
    """Factory for a mocked CommandRunner answering from a response table.

    Commands missing from the table exit 1.
    """

    def _make(responses: dict[tuple[str, ...], CommandResult]) -> MagicMock:
        runner = MagicMock(spec=CommandRunner)
        runner.dry_run = False

        def _run(command: list[str]) -> CommandResult:
            result = responses.get(tuple(command))
            if result is None:
                return CommandResult(
                    stdout="", stderr="unexpected command", exit_code=1, command=command
                )
            return result

        runner.run.side_effect = _run
        return runner

    return _make


@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_data() -> dict:
    """Create sample configuration data."""
    return {
        "commands": {"qm": "qm", "pct": "pct", "ssh": "ssh"},
        "defaults": {"guest_user": "root", "require_root": True},
        "logging": {"level": "WARNING", "file": None},
    }


@pytest.fixture
def temp_config_file(
    temp_config_dir: Path, sample_config_data: dict
) -> Generator[Path, None, None]:
    """Create a temporary config file with sample data."""
    config_path = temp_config_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.safe_dump(sample_config_data, f)
    yield config_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    from click.testing import CliRunner

    return CliRunner()
