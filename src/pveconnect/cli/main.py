"""Main CLI entry point for pveconnect.

This module defines the interactive command: list the host's VMs and
containers, ask for an id, and connect to the chosen guest.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click
from rich.console import Console

from pveconnect import __version__
from pveconnect.cli.context import Context
from pveconnect.core.exceptions import NoConnectionMethodError, PveConnectError
from pveconnect.core.preflight import run_preflight
from pveconnect.utils.logging import configure_logging, get_logger
from pveconnect.utils.output import OutputFormatter, error_console, print_error, prompt

logger = get_logger("cli")


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"pveconnect version [cyan]{__version__}[/cyan]")
    ctx.exit()


def run(ctx: Context) -> None:
    """Run one interactive connection session.

    Args:
        ctx: CLI context with configuration and collaborators.

    Raises:
        PveConnectError: On preflight failure, listing failure or an
            invalid id.
        NoConnectionMethodError: If the selected VM cannot be reached.
    """
    config = ctx.init_config()
    commands = config.commands

    run_preflight([commands.qm, commands.pct], require_root=config.defaults.require_root)

    inventory = ctx.inventory_fetcher().fetch()
    OutputFormatter().print_resources(inventory.resources)

    entered = prompt("Enter the ID of the resource to connect to:")
    resource = inventory.find(entered)
    logger.info(f"Selected {resource.kind.value} {resource.id} ({resource.name})")

    if resource.is_vm:
        ctx.vm_connector().connect(resource)
    else:
        ctx.container_connector().connect(resource)


@click.command()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v, -vv for more).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the session command instead of starting it.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show full error tracebacks.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="PVECONNECT_CONFIG",
    help="Path to config file (default: ~/.pveconnect/config.yaml).",
)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
def cli(
    verbose: int,
    dry_run: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """pveconnect - Connect to VMs and containers on this Proxmox VE host.

    Lists every VM (qm list) and LXC container (pct list), asks for the
    id to connect to, then opens a session:

    \b
      containers  pct enter <id>
      VMs         ssh <user>@<ip> using the QEMU guest agent's address,
                  falling back to qm terminal <id> (serial0 required)

    Must be run as root on the Proxmox VE host.
    """
    ctx = Context(
        config_path=Path(config_path) if config_path else None,
        verbose=verbose,
        dry_run=dry_run,
        debug=debug,
    )

    try:
        config = ctx.init_config()
        log_config = config.config.logging
        configure_logging(
            verbosity=verbose,
            level=log_config.level,
            log_file=log_config.file,
        )
        logger.debug(f"Loaded configuration from {config.path}: {config.to_dict()}")

        run(ctx)

    except NoConnectionMethodError as e:
        print_error(str(e))
    except PveConnectError as e:
        if debug:
            logger.exception("pveconnect failed")
        print_error(str(e))
        raise SystemExit(1) from e


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except PveConnectError as e:
        print_error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, click.Abort):
        error_console.print("\n[dim]Interrupted[/dim]")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("PVECONNECT_DEBUG") or "--debug" in sys.argv:
            import traceback

            traceback.print_exc()
        else:
            print_error(f"Unexpected error: {e}")
            error_console.print("[dim]Use --debug for full traceback[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
