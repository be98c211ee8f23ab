"""CLI module for streamgate."""

from streamgate.cli.app import app

__all__ = ["app"]
