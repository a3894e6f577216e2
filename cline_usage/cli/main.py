"""
CLI interface for the Cline usage log.

Provides command-line access to the usage recorder.
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from cline_usage.config.loader import RecorderConfig, config_from_env, load_recorder_config
from cline_usage.core.errors import ReadFailure
from cline_usage.core.recorder import UsageRecorder
from cline_usage.logging_setup import setup_logging

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML recorder configuration file"
    ),
    documents_dir: Optional[str] = typer.Option(
        None,
        "--documents-dir",
        "-d",
        help="Use this directory instead of the platform documents directory"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Diagnostic log level"
    )
):
    """Cline usage log CLI."""
    setup_logging(log_level)

    try:
        recorder_config = load_recorder_config(config) if config else config_from_env()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if documents_dir:
        recorder_config = replace(recorder_config, documents_dir=str(Path(documents_dir).expanduser()))
    ctx.obj = recorder_config

    if ctx.invoked_subcommand is None:
        console.print("Cline usage log - Use --help to see available commands")


def _recorder(ctx: typer.Context) -> UsageRecorder:
    return UsageRecorder(ctx.obj or RecorderConfig())


@app.command()
def init(ctx: typer.Context):
    """Create the usage log directory and show where records go."""
    recorder = _recorder(ctx)
    if not recorder.is_active:
        console.print("[red]Error initializing usage log:[/] see the log output above")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Usage log location: {recorder.log_path}")
    sys.exit(EXIT_CODE_OK)


@app.command()
def status(ctx: typer.Context):
    """Show the usage log location and how many records it holds."""
    recorder = _recorder(ctx)

    table = Table(title="Usage Log")
    table.add_column("Setting")
    table.add_column("Value")

    if not recorder.is_active:
        table.add_row("Location", "[red]unavailable[/]")
        console.print(table)
        sys.exit(EXIT_CODE_OK)

    log_file = recorder.log_file
    table.add_row("Location", str(log_file.path))
    table.add_row("Exists", "yes" if log_file.exists() else "no")
    try:
        count = str(len(log_file.read_records()))
    except ReadFailure:
        count = "[yellow]unreadable[/]"
    table.add_row("Records", count)

    console.print(table)
    sys.exit(EXIT_CODE_OK)


@app.command()
def track(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task identifier"),
    query: str = typer.Argument(..., help="Query text that started the task"),
    provider: str = typer.Option(..., "--provider", "-p", help="API provider identifier"),
    model: str = typer.Option(..., "--model", "-m", help="Model identifier"),
    user_id: Optional[str] = typer.Option(None, "--user-id", help="User identifier"),
    username: Optional[str] = typer.Option(None, "--username", help="User name")
):
    """
    Record one usage entry.

    Tracking is best-effort: this command exits 0 even when the record
    could not be written. Use --log-level INFO to see what happened.
    """
    recorder = _recorder(ctx)
    recorder.track(
        task_id=task_id,
        query=query,
        provider=provider,
        model=model,
        user_id=user_id,
        username=username
    )
    sys.exit(EXIT_CODE_OK)


if __name__ == "__main__":
    app()
