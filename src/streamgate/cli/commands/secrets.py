"""
streamgate secrets - Encrypted provider credentials.

Usage:
    streamgate secrets set groq
    streamgate secrets list
    streamgate secrets delete groq
"""

import os
from typing import Annotated

import typer
from rich.table import Table

from streamgate.cli.output import console, print_error, print_info, print_success
from streamgate.secrets import SecretsError, SecretsManager

app = typer.Typer(
    name="secrets",
    help="Store provider API keys encrypted on disk.",
)


@app.command("set")
def set_secret(
    provider: Annotated[
        str,
        typer.Argument(help="Provider name (openai, anthropic, groq, huggingface)."),
    ],
    value: Annotated[
        str | None,
        typer.Option(
            "--value",
            help="API key. Prompted for (hidden) when omitted.",
        ),
    ] = None,
) -> None:
    """Store an API key for a provider."""
    if value is None:
        value = typer.prompt(f"API key for {provider}", hide_input=True)

    if not value.strip():
        print_error("API key cannot be empty.")
        raise typer.Exit(1)

    manager = SecretsManager()
    manager.set(provider.lower(), value.strip())
    print_success(
        f"Stored key for {provider} (exported as {manager.get_env_var_name(provider)} on startup)"
    )


@app.command("list")
def list_secrets() -> None:
    """List stored keys (values are never shown)."""
    manager = SecretsManager()
    names = manager.list()
    if not names:
        print_info("No stored secrets.")
        return

    table = Table(title="Stored Secrets")
    table.add_column("Provider", style="cyan")
    table.add_column("Variable")
    table.add_column("Readable")

    for name in names:
        try:
            readable = "[green]yes[/green]" if manager.get(name) else "[yellow]empty[/yellow]"
        except SecretsError:
            readable = "[red]no[/red]"
        env_var = manager.get_env_var_name(name)
        if os.environ.get(env_var):
            env_var += " (set)"
        table.add_row(name, env_var, readable)

    console.print(table)


@app.command()
def delete(
    provider: Annotated[
        str,
        typer.Argument(help="Provider whose key to delete."),
    ],
) -> None:
    """Delete a stored key."""
    if not SecretsManager().delete(provider.lower()):
        print_error(f"No stored secret for {provider}.")
        raise typer.Exit(1)
    print_success(f"Deleted key for {provider}")
