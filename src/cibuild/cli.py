"""cibuild CLI entry point.

Usage:
    cibuild compile payload.yml            # Print the compiled script
    cibuild compile payload.yml -o out.sh  # Write it to a file
    cibuild languages                      # List registered profiles
    cibuild stages                         # Show the stage order
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cibuild._version import __version__
from cibuild.compiler import ScriptCompiler
from cibuild.config import CompileOptions
from cibuild.errors import CibuildError
from cibuild.resolver import YamlFileResolver
from cibuild.script import get_profile, list_languages, stages

console = Console(stderr=True)

typer_app = typer.Typer(help="Compile CI build specifications into bash scripts.")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the cibuild CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - profile selection, config status
    - Debug (CIBUILD_DEBUG=1): DEBUG level - every stage
    """
    if os.environ.get("CIBUILD_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("CIBUILD_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("cibuild")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cibuild {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """cibuild - compile CI build specifications into bash scripts."""


@typer_app.command("compile")
def compile_command(
    payload: Path = typer.Argument(..., help="Payload or build spec YAML file."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the script to a file instead of stdout."
    ),
    templates_dir: Optional[Path] = typer.Option(
        None, "--templates", help="Directory with alternate header/footer templates."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
) -> None:
    """Compile a payload file to a bash build script."""
    setup_logging(verbose)
    options = CompileOptions(
        templates_dir=templates_dir,
        log_ast=bool(os.environ.get("CIBUILD_DEBUG")),
    )

    try:
        text = ScriptCompiler(YamlFileResolver(payload), options).compile()
    except CibuildError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(e.exit_code)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote build script to {output}")
    else:
        typer.echo(text)


@typer_app.command("languages")
def languages_command() -> None:
    """List the registered language profiles."""
    table = Table(title="Languages")
    table.add_column("Language")
    table.add_column("Profile")
    for language in list_languages():
        table.add_row(language, get_profile(language).__name__)
    Console().print(table)


@typer_app.command("stages")
def stages_command() -> None:
    """Show the fixed stage order."""
    for i, stage in enumerate(stages(), start=1):
        typer.echo(f"{i:2d}. {stage.name} ({stage.kind})")


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
