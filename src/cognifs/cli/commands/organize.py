"""Organize command for cognifs CLI."""

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from cognifs.cli.app import app
from cognifs.cli.commands.command_utils import get_services
from cognifs.config import CognifsConfig
from cognifs.models import ExecutionMode
from cognifs.organizer.preview import display_plan, display_report

console = Console()


async def run_organize(
    config: CognifsConfig, root: Path, dry_run: bool, yes: bool, verbose: bool = False
):
    """Plan a reorganization, show it, then apply it once confirmed."""
    async with get_services(config) as services:
        organizer = services.organize_service

        plan = await organizer.plan(root)
        display_plan(plan, console)

        if dry_run or not plan.planned:
            report = await organizer.execute(plan, ExecutionMode.PREVIEW)
            display_report(report, console, plan.root, verbose)
            return

        confirmed = yes or config.skip_confirmation
        if not confirmed:
            # the prompt runs in a thread so the event loop stays free
            confirmed = await asyncio.to_thread(typer.confirm, "Apply these moves?", default=False)
        if not confirmed:
            console.print("[yellow]Aborted, no files were moved[/yellow]")
            return

        report = await organizer.execute(plan, ExecutionMode.APPLY, confirmed=True)
        display_report(report, console, plan.root, verbose)
        if report.failed:
            raise typer.Exit(1)


@app.command()
def organize(
    ctx: typer.Context,
    root: Path = typer.Argument(..., help="Directory to reorganize"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show the plan without moving anything."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply without asking for confirmation."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every skipped file."),
) -> None:
    """Move files under ROOT into folders named after their dominant tag."""
    config: CognifsConfig = ctx.obj
    try:
        asyncio.run(run_organize(config, root, dry_run or config.dry_run_default, yes, verbose))

    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Organize failed")
            typer.echo(f"Error during organize: {e}", err=True)
            raise typer.Exit(1)
        raise
