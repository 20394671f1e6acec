"""Logging setup and the error-reporting collaborator."""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from rich.console import Console
from rich.markup import escape

F = TypeVar("F", bound=Callable[..., Any])


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class LogService:
    """Receives error reports from the engine.

    Reports are fire-and-forget: they go to the standard logging system and,
    when flagged as user visible, are also printed on a rich console.
    """

    def __init__(self, console: Console | None = None, name: str = "bibref"):
        self.console = console or Console(stderr=True)
        self.logger = logging.getLogger(name)

    def error(
        self,
        message: str,
        error: BaseException | str = "",
        notify: bool = False,
        source: str = "",
    ) -> None:
        """Report an error.

        Args:
            message: Fixed, user-facing description
            error: The exception or an empty string
            notify: Show the message to the user
            source: Component tag
        """
        text = self._format(message, error, source)
        self.logger.error(text, exc_info=error if isinstance(error, BaseException) else None)
        if notify:
            self.console.print(f"[red]Error:[/red] {escape(text)}", highlight=False)

    def warn(self, message: str, notify: bool = False, source: str = "") -> None:
        """Report a warning."""
        text = self._format(message, "", source)
        self.logger.warning(text)
        if notify:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(text)}", highlight=False)

    def info(self, message: str, source: str = "") -> None:
        """Report an informational message."""
        self.logger.info(self._format(message, "", source))

    @staticmethod
    def _format(message: str, error: BaseException | str, source: str) -> str:
        text = f"[{source}] {message}" if source else message
        if error:
            text += f": {error}"
        return text


def catch_and_log(message: str, source: str, fallback: Any = None) -> Callable[[F], F]:
    """Turn exceptions raised by a method into a logged fallback value.

    The decorated method's instance must expose ``log_service``. A callable
    ``fallback`` is called to build a fresh value on each failure.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                self.log_service.error(message, e, True, source)
                return fallback() if callable(fallback) else fallback

        return wrapper  # type: ignore[return-value]

    return decorator
