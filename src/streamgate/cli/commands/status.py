"""
streamgate status - Provider availability.

Usage:
    streamgate status
    streamgate status --json
    streamgate status setup
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from streamgate.cli.output import console, print_error, print_warning
from streamgate.config import ConfigurationError
from streamgate.providers import active_provider, get_gateway, only_mock_available

app = typer.Typer(
    name="status",
    help="Provider availability and setup.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def status_overview(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show which providers can serve requests."""
    if ctx.invoked_subcommand is not None:
        return

    try:
        gateway = get_gateway()
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    statuses = gateway.get_provider_status()
    active = active_provider(statuses)

    if json_output:
        payload = {
            "active": active,
            "providers": [status.to_dict() for status in statuses],
            "config": gateway.config.to_display_dict(),
        }
        console.print_json(json.dumps(payload))
        return

    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Available")
    table.add_column("Enabled")
    table.add_column("Cost")

    for status in statuses:
        available = "[green]yes[/green]" if status.available else "[red]no[/red]"
        enabled = "yes" if status.enabled else "[dim]no[/dim]"
        table.add_row(status.name, available, enabled, status.cost)

    console.print(table)
    console.print(f"\n  [dim]Active provider:[/dim] {active}")
    console.print(
        f"  [dim]Preference order:[/dim] {', '.join(gateway.config.preferred_providers) or '-'}"
    )
    console.print(
        f"  [dim]Fallback:[/dim] {'enabled' if gateway.config.fallback_to_free else 'disabled'}"
    )

    if only_mock_available(statuses):
        print_warning("Only the demo provider is available.")
        console.print("[dim]Run 'streamgate status setup' to configure real providers[/dim]")


@app.command()
def setup() -> None:
    """Show environment variables that enable each provider."""
    try:
        gateway = get_gateway()
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    console.print(gateway.get_setup_instructions(), markup=False, highlight=False)
