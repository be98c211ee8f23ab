"""
Main Typer application for streamgate CLI.

This module defines the root CLI application and registers all command groups.
"""

import logging
from typing import Annotated

import typer

from streamgate import __version__
from streamgate.cli.commands import chat, config, secrets, status
from streamgate.cli.output import print_info, print_warning, setup_logging

# Create the main Typer app
app = typer.Typer(
    name="streamgate",
    help="Multi-provider streaming chat gateway with automatic failover.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"streamgate version [green]{__version__}[/green]")
        raise typer.Exit()


def _configured_log_level() -> str:
    from streamgate.config import ConfigurationError, get_config

    try:
        return get_config().general.log_level
    except ConfigurationError:
        # The command itself reports the broken config.
        return "WARNING"


def _load_stored_secrets() -> None:
    from streamgate.secrets import SecretsError, SecretsManager

    try:
        SecretsManager().load_all_to_env()
    except SecretsError as e:
        print_warning(f"Could not load stored secrets: {e}")


# noinspection PyUnusedLocal
@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log routing decisions and provider failures.",
        ),
    ] = False,
) -> None:
    """
    [bold blue]streamgate[/bold blue] - streaming chat over many providers

    Sends a conversation to the first available backend in your preference
    order, fails over on errors, and always answers (worst case with the
    built-in demo provider).
    """
    setup_logging(logging.DEBUG if verbose else _configured_log_level())
    _load_stored_secrets()


# Register command groups
app.command(name="chat")(chat.chat)
app.add_typer(status.app, name="status")
app.add_typer(config.app, name="config")
app.add_typer(secrets.app, name="secrets")


if __name__ == "__main__":
    app()
