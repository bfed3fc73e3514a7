"""Watch command for cognifs CLI."""

import asyncio
from pathlib import Path

import typer
from loguru import logger

from cognifs.cli.app import app
from cognifs.cli.commands.command_utils import console, get_services
from cognifs.cli.commands.sync import display_sync_summary
from cognifs.config import CognifsConfig
from cognifs.sync.scanner import Scanner
from cognifs.sync.watch_service import WatchService


async def run_watch(config: CognifsConfig, root: Path):
    """Sync once, then keep syncing on every change."""
    root = Scanner.resolve_root(root)
    async with get_services(config) as services:
        report = await services.sync_service.sync(root)
        display_sync_summary(report, console)

        watch_service = WatchService(services.sync_service, config, root)
        await watch_service.run()


@app.command()
def watch(
    ctx: typer.Context,
    root: Path = typer.Argument(..., help="Directory to watch"),
) -> None:
    """Keep the index in sync with ROOT until interrupted."""
    try:
        asyncio.run(run_watch(ctx.obj, root))
    except KeyboardInterrupt:
        console.print("\n[cyan]Stopped watching[/cyan]")
    except Exception as e:
        logger.exception("Watch failed")
        typer.echo(f"Error while watching: {e}", err=True)
        raise typer.Exit(1)
