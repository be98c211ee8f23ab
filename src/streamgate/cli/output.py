"""
Output formatting utilities for the CLI.

Provides consistent output formatting across all CLI commands.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Global console instance (stdout carries the streamed reply)
console = Console()

# Messages and logs go to stderr
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message."""
    err_console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    err_console.print(f"[blue]i[/blue] {message}")


def setup_logging(level: str | int = logging.WARNING) -> None:
    """Route the streamgate logger through rich on stderr."""
    logger = logging.getLogger("streamgate")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    logger.addHandler(RichHandler(console=err_console, show_path=False, rich_tracebacks=True))
    logger.propagate = False
