"""CLI main module for crabshell."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from crabshell.bootstrap import build_runtime
from crabshell.config import get_settings, setup_config_folder
from crabshell.errors import ConfigurationError
from crabshell.logging_utils import configure_logging

from .editing import HistoryHintAdapter, PathCompletionAdapter
from .loop import process_line, run_shell
from .render import Renderer

app = typer.Typer(
    name="crabshell",
    help="An interactive shell with folder-aware history hints.",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def main(
    log: bool = typer.Option(False, "--log", "-l", help="Write crabshell.log into the config folder"),
    config_folder: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config-folder", help="Folder for history, lock files and plugins"
    ),
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Run one command line and exit"),
) -> None:
    """Start the interactive shell."""
    settings = get_settings(config_folder, log_enabled=True if log else None)
    try:
        setup_config_folder(settings)
    except ConfigurationError as exc:
        typer.echo(f"Error starting crabshell: {exc}", err=True)
        raise typer.Exit(1) from exc
    configure_logging(settings)

    renderer = Renderer()
    runtime = build_runtime(settings, output=renderer.info)

    if command is not None:
        outcome = process_line(runtime, renderer, command)
        raise typer.Exit(1 if outcome is None else outcome.status)

    renderer.enable_editing(PathCompletionAdapter(runtime.completer), HistoryHintAdapter(runtime.hints))
    run_shell(runtime, renderer)


if __name__ == "__main__":
    app()
