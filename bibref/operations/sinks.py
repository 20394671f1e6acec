"""Destinations for exported text."""

from typing import Protocol

import click


class Sink(Protocol):
    """Clipboard-like destination that receives the exported string."""

    def write_text(self, text: str) -> None:
        """Deliver text."""
        ...


class MemorySink:
    """Keeps every delivered string; ``text`` is the latest one."""

    def __init__(self):
        self.history: list[str] = []

    @property
    def text(self) -> str:
        """Most recently delivered text."""
        return self.history[-1] if self.history else ""

    def write_text(self, text: str) -> None:
        self.history.append(text)


class EchoSink:
    """Writes delivered text to standard output through click."""

    def __init__(self, err: bool = False):
        self.err = err

    def write_text(self, text: str) -> None:
        if text:
            click.echo(text, err=self.err)
