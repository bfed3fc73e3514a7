"""Command module for cognifs index operations."""

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.tree import Tree

from cognifs.cli.app import app
from cognifs.cli.commands.command_utils import get_services
from cognifs.config import CognifsConfig
from cognifs.sync.utils import SyncReport

console = Console()


def relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def display_sync_summary(report: SyncReport, console: Console = console):
    """Display a one-line summary of sync changes."""
    diff = report.diff
    if diff.total_changes == 0:
        console.print("[green]Everything up to date[/green]")
    else:
        # Format as: "Synced X files (A new, B modified, C deleted)"
        changes = []
        if diff.to_add:
            changes.append(f"[green]{len(diff.to_add)} new[/green]")
        if diff.to_update:
            changes.append(f"[yellow]{len(diff.to_update)} modified[/yellow]")
        if diff.to_remove:
            changes.append(f"[red]{len(diff.to_remove)} deleted[/red]")
        console.print(f"Synced {diff.total_changes} files ({', '.join(changes)})")

    if report.degraded:
        console.print(f"[yellow]{len(report.degraded)} files tagged from their path only[/yellow]")
    if report.errors:
        console.print(f"[red]{len(report.errors)} files could not be indexed[/red]")


def display_detailed_sync_results(report: SyncReport, root: Path, console: Console = console):
    """Display detailed sync results with trees."""
    diff = report.diff
    if diff.total_changes == 0 and not report.errors:
        console.print("\n[green]Everything up to date[/green]")
        return

    console.print("\n[bold]Sync Results[/bold]")
    tree = Tree(f"[bold]{root}[/bold]")
    if diff.to_add:
        created = tree.add("[green]Created[/green]")
        for path in sorted(diff.to_add):
            checksum = diff.checksums.get(path, "")
            created.add(f"[green]{relative(path, root)}[/green] ({checksum[:8]})")
    if diff.to_update:
        modified = tree.add("[yellow]Modified[/yellow]")
        for path in sorted(diff.to_update):
            checksum = diff.checksums.get(path, "")
            modified.add(f"[yellow]{relative(path, root)}[/yellow] ({checksum[:8]})")
    if diff.to_remove:
        deleted = tree.add("[red]Deleted[/red]")
        for path in sorted(diff.to_remove):
            deleted.add(f"[red]{relative(path, root)}[/red]")
    if report.errors:
        errors = tree.add("[red]Errors[/red]")
        for path, error in sorted(report.errors.items()):
            errors.add(f"[red]{relative(path, root)}[/red]: {error}")
    console.print(tree)


async def run_sync(config: CognifsConfig, root: Path, verbose: bool = False):
    """Run sync operation."""
    async with get_services(config) as services:
        report = await services.sync_service.sync(root)

    if verbose:
        display_detailed_sync_results(report, root.resolve())
    else:
        display_sync_summary(report)


@app.command()
def index(
    ctx: typer.Context,
    root: Path = typer.Argument(..., help="Directory to index"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed sync information.",
    ),
) -> None:
    """Sync the search index with the files under ROOT."""
    try:
        asyncio.run(run_sync(ctx.obj, root, verbose))

    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Sync failed")
            typer.echo(f"Error during sync: {e}", err=True)
            raise typer.Exit(1)
        raise
