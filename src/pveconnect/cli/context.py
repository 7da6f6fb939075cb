"""CLI context for pveconnect.

This module defines the context object holding the configuration and
the collaborators a connection run needs, built lazily from CLI options.
"""

from __future__ import annotations

from pathlib import Path

from pveconnect.core.config import ConfigManager
from pveconnect.core.connector import ContainerConnector, VMConnector
from pveconnect.core.inventory import InventoryFetcher
from pveconnect.core.runner import CommandRunner
from pveconnect.utils.output import prompt


def ask_guest_username(default: str) -> str:
    """Prompt for the SSH username of a VM."""
    return prompt(f"Enter username for VM (default: {default}):", default=default)


class Context:
    """CLI context object.

    Attributes:
        config: ConfigManager instance.
        runner: CommandRunner instance.
        verbose: Verbosity level.
        dry_run: Whether to print session commands instead of running them.
        debug: Whether to show debug tracebacks.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        verbose: int = 0,
        dry_run: bool = False,
        debug: bool = False,
    ) -> None:
        self.config_path = config_path
        self.config: ConfigManager | None = None
        self.runner: CommandRunner | None = None
        self.verbose = verbose
        self.dry_run = dry_run
        self.debug = debug

    def init_config(self) -> ConfigManager:
        """Initialize configuration manager.

        An explicitly given config path must exist.

        Returns:
            ConfigManager instance.
        """
        if self.config is None:
            self.config = ConfigManager(
                self.config_path, required=self.config_path is not None
            )
        return self.config

    def init_runner(self) -> CommandRunner:
        if self.runner is None:
            self.runner = CommandRunner(dry_run=self.dry_run)
        return self.runner

    def inventory_fetcher(self) -> InventoryFetcher:
        commands = self.init_config().commands
        return InventoryFetcher(self.init_runner(), qm=commands.qm, pct=commands.pct)

    def container_connector(self) -> ContainerConnector:
        commands = self.init_config().commands
        return ContainerConnector(self.init_runner(), pct=commands.pct)

    def vm_connector(self) -> VMConnector:
        config = self.init_config()
        return VMConnector(
            self.init_runner(),
            ask_username=ask_guest_username,
            qm=config.commands.qm,
            ssh=config.commands.ssh,
            default_user=config.defaults.guest_user,
            show_progress=True,
        )
