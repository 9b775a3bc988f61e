"""Command-line interface for dirshell."""

from dirshell.cli.main import cli, main

__all__ = ["cli", "main"]
