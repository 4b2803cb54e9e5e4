"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from business logic.
"""

from collections.abc import Callable
from datetime import datetime
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.table import Table
import typer

from underplayed.config import get_logger
from underplayed.domain.entities import JobSnapshot, JobState

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

STATE_STYLES = {
    JobState.COMPLETED: "bold green",
    JobState.FAILED: "bold red",
}


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Logs unexpected errors with traceback, prints a short message and exits
    with status 1. ``typer.Exit`` and ``typer.Abort`` pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def display_snapshot(snapshot: JobSnapshot) -> None:
    """Print a job snapshot as a two-column summary table."""
    style = STATE_STYLES.get(snapshot.state, "yellow")
    updated = datetime.fromtimestamp(snapshot.updated_at_ms / 1000)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()

    table.add_row("Process", snapshot.process_id)
    table.add_row("State", f"[{style}]{snapshot.state}[/{style}]")
    table.add_row("Message", snapshot.message)
    if snapshot.progress_percent is not None:
        table.add_row("Progress", f"{snapshot.progress_percent}%")
    if snapshot.playlist_url:
        table.add_row("Playlist", snapshot.playlist_url)
    if snapshot.error:
        table.add_row("Error", f"[red]{snapshot.error}[/red]")
    for key, value in sorted(snapshot.details.items()):
        table.add_row(key.replace("_", " ").capitalize(), str(value))
    table.add_row("Updated", f"{updated:%Y-%m-%d %H:%M:%S}")

    console.print(table)
