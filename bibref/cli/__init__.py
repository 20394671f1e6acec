"""Command line interface."""

from bibref.cli.main import cli, main

__all__ = ["cli", "main"]
