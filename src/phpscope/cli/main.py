"""phpscope CLI - PHP source reflection tool.

This module provides the command-line interface for phpscope, enabling
processing of PHP sources, class inspection, strict validation and export.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="phpscope",
    help="Reflection of PHP code built from its tokens",
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()
err_console = Console(stderr=True)

# Global verbose flag
_verbose: bool = False

SourcePath = Annotated[
    Path,
    typer.Argument(
        help="PHP file or directory to process",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
    ),
]


def set_verbose(verbose: bool) -> None:
    """Set global verbose mode."""
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose


def print_exception(e: Exception) -> None:
    """Print exception details in verbose mode."""
    if _verbose:
        err_console.print("\n[dim]--- Traceback (verbose mode) ---[/dim]")
        err_console.print(f"[dim]{traceback.format_exc()}[/dim]")


def configure_logging() -> None:
    """Configure logging from the settings, or DEBUG in verbose mode."""
    from phpscope.core.config import get_config

    level = logging.DEBUG if _verbose else getattr(logging, get_config().log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with full tracebacks"),
    ] = False,
) -> None:
    """phpscope CLI - PHP source reflection."""
    set_verbose(verbose)
    configure_logging()


def _analyze(source_path: Path):
    from phpscope.services.analysis_service import AnalysisService

    service = AnalysisService()
    with console.status("[bold blue]Processing..."):
        result = service.analyze(source_path)
    return service, result


@app.command()
def parse(source_path: SourcePath) -> None:
    """Process PHP sources and print what was found.

    Example:
        phpscope parse src/
    """
    from phpscope.cli._tables import build_failures_table, build_summary_table

    console.print(f"[blue]Processing:[/blue] {source_path}")
    _, result = _analyze(source_path)

    console.print(build_summary_table(result))
    if result.success:
        console.print("[green]✓[/green] All files processed successfully")
    else:
        err_console.print(build_failures_table(result.failures))
        err_console.print(f"[red]Error:[/red] {len(result.failures)} file(s) could not be processed")
        raise typer.Exit(1)


@app.command()
def show(
    name: Annotated[str, typer.Argument(help="Fully qualified class name")],
    source_path: SourcePath,
) -> None:
    """Show a class with its composed members.

    Example:
        phpscope show 'App\\Model\\User' src/
    """
    from phpscope.cli._tables import build_class_table, build_members_table

    service, _ = _analyze(source_path)
    summary = service.find_class(name.lstrip("\\"))
    if summary is None:
        err_console.print(f"[red]Error:[/red] Class not found: {name}")
        reflection = service.get_class(name.lstrip("\\"))
        if hasattr(reflection, "get_reasons"):
            for reason in reflection.get_reasons():
                err_console.print(f"  - {reason.message}")
        raise typer.Exit(1)

    console.print(build_class_table(summary))
    console.print(build_members_table(summary))


@app.command()
def validate(source_path: SourcePath) -> None:
    """Process PHP sources and check them strictly.

    Duplicate definitions and references to undefined classes, interfaces
    or traits are reported as errors.

    Example:
        phpscope validate src/
    """
    from phpscope.cli._tables import build_failures_table, build_validation_table

    service, result = _analyze(source_path)
    if not result.success:
        err_console.print(build_failures_table(result.failures))

    validation = service.validate()
    if validation.is_valid and result.success:
        console.print("[green]✓[/green] No problems found")
        return

    if not validation.is_valid:
        err_console.print(build_validation_table(validation.errors))
    err_console.print(
        f"[red]Error:[/red] Validation failed with {len(validation.errors)} error(s) "
        f"and {len(result.failures)} failed file(s)"
    )
    raise typer.Exit(1)


@app.command()
def export(
    source_path: SourcePath,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path (stdout when omitted)"),
    ] = None,
) -> None:
    """Export a JSON snapshot of the processed sources.

    Example:
        phpscope export src/ -o snapshot.json
    """
    from phpscope.core.serializer import SerializationError

    service, result = _analyze(source_path)
    try:
        data = service.export(output)
    except (SerializationError, OSError) as e:
        err_console.print(f"[red]Error:[/red] Export failed: {e}")
        print_exception(e)
        raise typer.Exit(1)

    if output is None:
        typer.echo(data)
        return
    console.print(f"[green]✓[/green] Exported to: {output}")
    console.print(f"  Classes: {result.classes_count}")
    console.print(f"  Functions: {result.functions_count}")
    console.print(f"  Constants: {result.constants_count}")


if __name__ == "__main__":
    app()
