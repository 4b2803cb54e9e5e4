"""Underplayed CLI - Main application entry point and app structure."""

import asyncio
from typing import Annotated

from rich.console import Console
import typer
import uvicorn

from underplayed import __version__
from underplayed.config import (
    configure_uvicorn_logging,
    get_logger,
    log_startup_info,
    settings,
    setup_loguru_logger,
)
from underplayed.domain.entities import JobSnapshot, JobState
from underplayed.infrastructure.api import create_app
from underplayed.infrastructure.cli.ui import command_error_handler, display_snapshot
from underplayed.infrastructure.factories import create_app_context

console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"Underplayed v{__version__} - least-played-first shuffles of your liked songs",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize Underplayed CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_loguru_logger(verbose)


@app.command(name="serve", rich_help_panel="Server")
@command_error_handler
def serve(
    host: Annotated[
        str | None, typer.Option("--host", help="Interface to bind")
    ] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Port to bind")] = None,
) -> None:
    """Run the HTTP API for starting and polling playlist jobs."""
    log_startup_info()
    configure_uvicorn_logging()
    uvicorn.run(
        create_app(settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_config=None,
    )


async def _run_shuffle(playlist_name: str | None) -> JobSnapshot:
    context = await create_app_context(settings)
    try:
        command = await context.runner.accept(playlist_name)
        console.print(f"[dim]Process {command.process_id}[/dim]")
        with console.status("Generating playlist..."):
            return await context.runner.run(command)
    finally:
        await context.aclose()


@app.command(name="shuffle", rich_help_panel="Playlists")
@command_error_handler
def shuffle(
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Playlist name (default: timestamped)"),
    ] = None,
) -> None:
    """Build the cumulative play-count shuffle playlist now, in the foreground."""
    snapshot = asyncio.run(_run_shuffle(name))
    display_snapshot(snapshot)
    if snapshot.state is JobState.FAILED:
        raise typer.Exit(code=1)


async def _load_status(process_id: str) -> JobSnapshot | None:
    context = await create_app_context(settings)
    try:
        return await context.status_repository.get(process_id)
    finally:
        await context.aclose()


@app.command(name="status", rich_help_panel="Playlists")
@command_error_handler
def status(
    process_id: Annotated[str, typer.Argument(help="Process id returned by shuffle")],
) -> None:
    """Show the latest status of a playlist job."""
    snapshot = asyncio.run(_load_status(process_id))
    if snapshot is None:
        console.print("[yellow]Process ID not found or expired.[/yellow]")
        raise typer.Exit(code=1)
    display_snapshot(snapshot)


@app.command(name="version", rich_help_panel="System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]Underplayed[/bold bright_blue] [dim]v{__version__}[/dim]")


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
