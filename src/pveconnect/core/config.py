"""Configuration management for pveconnect.

This module provides a Pydantic-based configuration system that supports:
- An optional YAML configuration file
- Environment variable override of the file location
- Default values with validation

The default config location is ~/.pveconnect/config.yaml, which can be
overridden with the PVECONNECT_CONFIG environment variable. A missing
file is not an error: the built-in defaults describe a stock Proxmox VE
host.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pveconnect.core.exceptions import ConfigNotFoundError, ConfigurationError


def is_valid_username(name: str) -> bool:
    """Check that ``name`` can only be read as the user part of ``user@host``.

    A leading ``-`` would make ssh parse the argument as an option.
    """
    return (
        bool(name)
        and not name.startswith("-")
        and "@" not in name
        and not any(c.isspace() for c in name)
    )


def get_default_config_path() -> Path:
    """Get the default configuration file path.

    The path can be overridden by setting the PVECONNECT_CONFIG
    environment variable.

    Returns:
        Path to the configuration file.
    """
    env_path = os.environ.get("PVECONNECT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".pveconnect" / "config.yaml"


class LoggingConfig(BaseModel):
    """Logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        file: Path to log file (optional).
    """

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="WARNING", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


class CommandsConfig(BaseModel):
    """Names or paths of the host tools pveconnect shells out to.

    Args:
        qm: QEMU/KVM VM manager.
        pct: LXC container toolkit.
        ssh: OpenSSH client.
    """

    model_config = ConfigDict(extra="forbid")

    qm: Annotated[str, Field(min_length=1)] = "qm"
    pct: Annotated[str, Field(min_length=1)] = "pct"
    ssh: Annotated[str, Field(min_length=1)] = "ssh"


class DefaultsConfig(BaseModel):
    """Default values for interactive prompts and startup checks.

    Args:
        guest_user: Username used when the SSH username prompt is left blank.
        require_root: Refuse to start unless running as root.
    """

    model_config = ConfigDict(extra="forbid")

    guest_user: Annotated[str, Field(min_length=1)] = Field(
        default="root", description="Default SSH username for VMs"
    )
    require_root: bool = Field(default=True, description="Require root privileges")

    @field_validator("guest_user")
    @classmethod
    def validate_guest_user(cls, v: str) -> str:
        """Reject usernames that would change the meaning of user@host."""
        v = v.strip()
        if not is_valid_username(v):
            raise ValueError(f"Invalid guest user: {v!r}")
        return v


class Config(BaseModel):
    """Main configuration model for pveconnect.

    Example config.yaml:
        ```yaml
        commands:
          qm: /usr/sbin/qm
          pct: /usr/sbin/pct
          ssh: ssh

        defaults:
          guest_user: admin
          require_root: true

        logging:
          level: INFO
          file: ~/.pveconnect/pveconnect.log
        ```
    """

    model_config = ConfigDict(extra="forbid")

    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Loads and validates pveconnect configuration.

    Args:
        path: Optional path to config file. Uses default if not specified.
        required: Raise if the file does not exist instead of using defaults.

    Attributes:
        path: Path to the configuration file.
        config: The loaded and validated Config object.

    Example:
        >>> cm = ConfigManager()
        >>> cm.config.commands.qm
        'qm'
    """

    def __init__(self, path: Path | str | None = None, required: bool = False) -> None:
        if path is None:
            self.path = get_default_config_path()
        else:
            self.path = Path(path).expanduser()

        if required and not self.path.exists():
            raise ConfigNotFoundError(str(self.path))

        self.config = self._load_or_default()

    def _load_or_default(self) -> Config:
        if self.path.exists():
            return self._load()
        return Config()

    def _load(self) -> Config:
        """Load and validate configuration from file.

        Returns:
            Validated Config object.

        Raises:
            ConfigurationError: If the config file is invalid.
        """
        try:
            with self.path.open("r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file: {e}",
                details={"path": str(self.path)},
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config: {e}",
                details={"path": str(self.path)},
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping",
                details={"path": str(self.path)},
            )

        try:
            return Config.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Failed to load config: {e}",
                details={"path": str(self.path)},
            ) from e

    @property
    def commands(self) -> CommandsConfig:
        """Configured host tool commands."""
        return self.config.commands

    @property
    def defaults(self) -> DefaultsConfig:
        return self.config.defaults

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of the config.
        """
        return self.config.model_dump(exclude_none=True)
