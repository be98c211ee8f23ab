"""
streamgate config - Configuration management commands.

Usage:
    streamgate config show
    streamgate config show gateway --json
    streamgate config path
    streamgate config set gateway.fallback_to_free false
"""

import json
from typing import Annotated

import typer
import yaml
from rich.panel import Panel
from rich.syntax import Syntax

from streamgate.cli.output import console, print_error, print_success
from streamgate.config import (
    Config,
    ConfigurationError,
    clear_config_cache,
    deep_merge,
    get_nested_value,
    load_config,
    load_yaml_file,
    parse_env_value,
    save_yaml_file,
    set_nested_value,
)
from streamgate.storage.paths import get_global_config_path

app = typer.Typer(
    name="config",
    help="Configuration management.",
)


@app.command()
def show(
    section: Annotated[
        str | None,
        typer.Argument(
            help="Config section to show (e.g., 'gateway', 'providers.groq').",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show the effective configuration."""
    try:
        config_dict = load_config().model_dump(mode="json")
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    if section:
        config_dict = get_nested_value(config_dict, section)
        if config_dict is None:
            print_error(f"Section '{section}' not found in configuration.")
            raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(config_dict, default=str))
        return

    output = yaml.safe_dump(
        config_dict,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    if section:
        console.print(Panel(Syntax(output, "yaml"), title=f"[cyan]{section}[/cyan]"))
    else:
        console.print(Syntax(output, "yaml"))


@app.command()
def path() -> None:
    """Print the config file location."""
    config_path = get_global_config_path()
    typer.echo(str(config_path))
    if not config_path.exists():
        console.print("[dim]  (not created yet; 'streamgate config set' creates it)[/dim]")


@app.command("set")
def set_value(
    key: Annotated[
        str,
        typer.Argument(
            help="Configuration key (e.g., 'gateway.preferred_providers').",
        ),
    ],
    value: Annotated[
        str,
        typer.Argument(
            help="Value to set. Comma-separated values become lists.",
        ),
    ],
) -> None:
    """Set a value in the config file."""
    config_path = get_global_config_path()

    try:
        config_dict = load_yaml_file(config_path)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    parsed_value = parse_env_value(value)
    config_dict = set_nested_value(config_dict, key, parsed_value)

    # Refuse to write a file that would no longer load.
    try:
        Config.model_validate(deep_merge(Config().model_dump(mode="json"), config_dict))
    except ValueError as e:
        print_error(f"Invalid value for {key}: {e}")
        raise typer.Exit(1)

    try:
        save_yaml_file(config_path, config_dict)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    clear_config_cache()
    print_success(f"Set {key} = {parsed_value!r}")
