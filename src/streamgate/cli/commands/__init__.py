"""CLI command modules."""

from streamgate.cli.commands import chat, config, secrets, status

__all__ = ["chat", "config", "secrets", "status"]
