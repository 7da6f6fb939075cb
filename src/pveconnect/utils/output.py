"""Rich terminal output utilities for pveconnect.

This module provides formatted output using the Rich library,
including the resource table, prompts, spinners, and status messages.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from pveconnect.models.resource import Resource, status_color

# Global console instance
console = Console()
error_console = Console(stderr=True)


class OutputFormatter:
    """Renders pveconnect data as Rich tables.

    Args:
        output_console: Rich console instance for output.

    Example:
        >>> formatter = OutputFormatter()
        >>> formatter.print_resources(inventory.vms + inventory.containers)
    """

    def __init__(self, output_console: Console | None = None) -> None:
        self.console = output_console or console

    def print_resources(self, resources: list[Resource]) -> None:
        """Print resources as a single table, in the order given.

        Args:
            resources: Resources to display.
        """
        table = Table(title="Available Resources", show_header=True)
        table.add_column("ID", justify="right", style="bold", no_wrap=True)
        table.add_column("Type", justify="center")
        table.add_column("Name", style="white")
        table.add_column("Status")

        for resource in resources:
            kind_text = Text(resource.kind.value)
            kind_text.stylize(resource.kind.color)

            status_text = Text(resource.status)
            status_text.stylize(status_color(resource.status))

            table.add_row(str(resource.id), kind_text, Text(resource.name), status_text)

        self.console.print(table)


def print_error(message: str) -> None:
    """Print an error message to stderr.

    The message is printed literally; it may contain operator input.

    Args:
        message: Error message to display.
    """
    error_console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message to display.
    """
    console.print(f"[yellow]![/yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message.

    Args:
        message: Info message to display.
    """
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def prompt(message: str, default: str | None = None) -> str:
    """Read one line of input from the operator.

    Args:
        message: Prompt text.
        default: Value returned when the line is blank.

    End of input is read as a blank line.

    Returns:
        The stripped input, or ``default`` if blank and a default is set.
    """
    try:
        response = console.input(f"{escape(message)} ").strip()
    except EOFError:
        response = ""

    if not response and default is not None:
        return default

    return response


def create_spinner_progress() -> Progress:
    """Create a simple spinner progress for indeterminate operations.

    Returns:
        Progress instance with just spinner and description.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
