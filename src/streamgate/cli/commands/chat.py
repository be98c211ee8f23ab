"""
streamgate chat - Stream a reply from the best available provider.

Usage:
    streamgate chat "Your prompt here"
    streamgate chat "Prompt" --system "You are terse."
    streamgate chat "Prompt" --prefer groq,huggingface
    streamgate chat "Prompt" --no-fallback --json
"""

import asyncio
import json
from typing import Annotated

import typer

from streamgate.audit import clear_audit_logger
from streamgate.cli.output import console, err_console, print_error
from streamgate.config import AdapterConfigUpdate, ConfigurationError
from streamgate.providers import ChatMessage, Gateway, ProviderError, get_gateway


def _split(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(name.strip() for name in value.split(",") if name.strip())


def build_messages(prompt: str, system: str | None = None) -> list[ChatMessage]:
    """Conversation for a one-shot prompt."""
    messages = []
    if system:
        messages.append(ChatMessage.system(system))
    messages.append(ChatMessage.user(prompt))
    return messages


async def _stream(gateway: Gateway, messages: list[ChatMessage], json_output: bool) -> None:
    outcome = await gateway.stream_chat(messages)

    try:
        if json_output:
            text = await outcome.collect()
            console.print_json(
                json.dumps(
                    {
                        "provider": outcome.provider_name,
                        "cost": outcome.cost_tier,
                        "response": text,
                    }
                )
            )
            return

        async for chunk in outcome.stream:
            typer.echo(chunk.decode("utf-8", errors="replace"), nl=False)
        typer.echo()
        err_console.print(
            f"[dim]Provider: {outcome.provider_name} | Cost: {outcome.cost_tier}[/dim]"
        )

    except ProviderError as e:
        # Output may already be on screen; there is nothing to fail over to.
        typer.echo()
        print_error(f"Stream from {outcome.provider_name} failed: {e}")
        raise typer.Exit(4)

    finally:
        await gateway.aclose()
        clear_audit_logger()


def chat(
    prompt: Annotated[
        str,
        typer.Argument(help="Message to send."),
    ],
    system: Annotated[
        str | None,
        typer.Option(
            "--system",
            "-s",
            help="System instruction.",
        ),
    ] = None,
    prefer: Annotated[
        str | None,
        typer.Option(
            "--prefer",
            help="Comma-separated provider order for this request.",
        ),
    ] = None,
    enable: Annotated[
        str | None,
        typer.Option(
            "--enable",
            help="Comma-separated providers allowed for this request.",
        ),
    ] = None,
    no_fallback: Annotated[
        bool,
        typer.Option(
            "--no-fallback",
            help="Go straight to the demo provider if the first choice fails.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Collect the reply and print it as JSON.",
        ),
    ] = False,
) -> None:
    """Stream a chat reply to stdout."""
    try:
        gateway = get_gateway()
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    update = AdapterConfigUpdate(
        preferred_providers=_split(prefer),
        enabled_providers=_split(enable),
        fallback_to_free=False if no_fallback else None,
    )
    if update.changes():
        gateway.configure(update)

    asyncio.run(_stream(gateway, build_messages(prompt, system), json_output))
