"""Main CLI entry point and application setup."""

from dataclasses import dataclass
from pathlib import Path

import click
from click.exceptions import Exit
from rich.console import Console
from rich.table import Table

from bibref import __version__
from bibref.citations.registry import StyleRegistry
from bibref.config import Preferences
from bibref.core.models import ExportFormat, load_records
from bibref.exceptions import BibrefError
from bibref.logs import LogService, setup_logging
from bibref.operations.sinks import EchoSink
from bibref.operations.workflows import ExportWorkflow, ExportWorkflowConfig


@dataclass
class Context:
    """CLI context that holds shared resources."""

    preferences: Preferences
    console: Console
    log_service: LogService
    registry: StyleRegistry
    debug: bool = False


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class BibrefGroup(click.Group):
    """Custom group that handles KeyboardInterrupt."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=BibrefGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--styles-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding custom CSL styles",
)
@click.version_option(
    version=__version__, prog_name="bibref", message="bibref version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    styles_dir: Path | None,
) -> None:
    """Citation export tool.

    Converts bibliographic records into BibTeX entries, BibTeX keys or
    styled plain-text bibliographies.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    try:
        preferences = Preferences.load(config)
    except ValueError as e:
        if debug:
            raise
        click.echo(f"Error loading config file: {e}", err=True)
        ctx.exit(1)

    if styles_dir:
        preferences.set("imported_csl_styles_path", str(styles_dir))

    console = create_console(no_color=no_color)
    log_service = LogService(console=Console(stderr=True, no_color=no_color))

    ctx.obj = Context(
        preferences=preferences,
        console=console,
        log_service=log_service,
        registry=StyleRegistry(preferences, log_service=log_service),
        debug=debug,
    )


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "export_format",
    type=click.Choice([f.value for f in ExportFormat], case_sensitive=False),
    default=ExportFormat.BIBTEX.value,
    show_default=True,
    help="Output format",
)
@click.option("--style", "-s", help="Style key for plain-text output")
@click.option(
    "--replace/--no-replace",
    default=None,
    help="Apply the publication replacement table",
)
@click.pass_obj
def export(
    obj: Context,
    source: Path,
    export_format: str,
    style: str | None,
    replace: bool | None,
) -> None:
    """Export records from a JSON or YAML file."""
    try:
        records = load_records(source)
    except BibrefError as e:
        raise click.ClickException(str(e))

    if replace is not None:
        obj.preferences.set("enable_export_replacement", replace)

    workflow = ExportWorkflow(
        preferences=obj.preferences,
        sink=EchoSink(),
        log_service=obj.log_service,
        registry=obj.registry,
    )
    result = workflow.execute(
        records,
        ExportFormat.parse(export_format),
        ExportWorkflowConfig(style=style),
    )
    if not result.success:
        raise Exit(1)


@cli.command()
@click.pass_obj
def styles(obj: Context) -> None:
    """List available citation styles."""
    selected = obj.preferences.get("selected_csl_style")

    table = Table(title="Citation Styles")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Source", style="dim")

    for style in obj.registry.list_styles():
        marker = " *" if style.key == selected else ""
        source = "built-in" if obj.registry.is_builtin(style.key) else "custom"
        table.add_row(f"{style.key}{marker}", style.name, source)

    obj.console.print(table)


def main() -> None:
    """Entry point for the bibref command."""
    cli()


if __name__ == "__main__":
    main()
