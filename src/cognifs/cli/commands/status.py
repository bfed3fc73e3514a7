"""Status command for cognifs CLI."""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Set

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from cognifs.cli.app import app
from cognifs.cli.commands.command_utils import get_services
from cognifs.config import CognifsConfig
from cognifs.sync.utils import SyncReport

# Create rich console
console = Console()


def add_files_to_tree(
    tree: Tree, paths: Set[Path], root: Path, style: str, checksums: Optional[Dict[Path, str]] = None
):
    """Add files to tree, grouped by directory."""
    # Group by directory
    by_dir: Dict[str, list] = {}
    for path in sorted(paths):
        relative = path.relative_to(root) if path.is_relative_to(root) else path
        dir_name = str(relative.parent) if relative.parent != Path(".") else ""
        by_dir.setdefault(dir_name, []).append((relative.name, path))

    # Add to tree
    for dir_name, files in sorted(by_dir.items()):
        if dir_name:
            branch = tree.add(f"[bold]{dir_name}/[/bold]")
        else:
            branch = tree

        for file_name, full_path in sorted(files):
            if checksums and full_path in checksums:
                checksum_short = checksums[full_path][:8]
                branch.add(f"[{style}]{file_name}[/{style}] ({checksum_short})")
            else:
                branch.add(f"[{style}]{file_name}[/{style}]")


def display_changes(
    title: str, changes: SyncReport, root: Path, verbose: bool = False, console: Console = console
):
    """Display changes using Rich for better visualization."""
    diff = changes.diff
    tree = Tree(title)

    if diff.total_changes == 0:
        tree.add("No changes")
        if changes.protected:
            tree.add(f"[dim]{len(changes.protected)} protected files not indexed[/dim]")
        console.print(Panel(tree, expand=False))
        return

    if not verbose:
        # Compact display by top-level directory
        by_dir: Dict[str, Dict[str, int]] = {}
        for change_type, paths in [
            ("new", diff.to_add),
            ("modified", diff.to_update),
            ("deleted", diff.to_remove),
        ]:
            for path in paths:
                parts = path.relative_to(root).parts if path.is_relative_to(root) else path.parts
                dir_name = parts[0] if len(parts) > 1 else "."
                by_dir.setdefault(dir_name, {"new": 0, "modified": 0, "deleted": 0})
                by_dir[dir_name][change_type] += 1

        # Show directory summaries
        for dir_name, counts in sorted(by_dir.items()):
            summary_parts = []
            if counts["new"]:
                summary_parts.append(f"[green]+{counts['new']} new[/green]")
            if counts["modified"]:
                summary_parts.append(f"[yellow]~{counts['modified']} modified[/yellow]")
            if counts["deleted"]:
                summary_parts.append(f"[red]-{counts['deleted']} deleted[/red]")

            tree.add(f"[bold]{dir_name}/[/bold] {' '.join(summary_parts)}")

    else:
        # Show total counts
        summary = []
        if diff.to_add:
            summary.append(f"[green]{len(diff.to_add)} new[/green]")
        if diff.to_update:
            summary.append(f"[yellow]{len(diff.to_update)} modified[/yellow]")
        if diff.to_remove:
            summary.append(f"[red]{len(diff.to_remove)} deleted[/red]")
        tree.add(f"Found {', '.join(summary)}")

        # Add file groups with full paths
        if diff.to_add:
            new_branch = tree.add("[green]New Files[/green]")
            add_files_to_tree(new_branch, diff.to_add, root, "green", diff.checksums)

        if diff.to_update:
            mod_branch = tree.add("[yellow]Modified[/yellow]")
            add_files_to_tree(mod_branch, diff.to_update, root, "yellow", diff.checksums)

        if diff.to_remove:
            del_branch = tree.add("[red]Deleted[/red]")
            add_files_to_tree(del_branch, diff.to_remove, root, "red")

    if changes.protected:
        tree.add(f"[dim]{len(changes.protected)} protected files not indexed[/dim]")
    if changes.errors:
        tree.add(f"[red]{len(changes.errors)} files could not be read[/red]")

    console.print(Panel(tree, expand=False))


async def run_status(config: CognifsConfig, root: Path, verbose: bool = False):
    """Check sync status of files vs the index."""
    async with get_services(config) as services:
        changes = await services.sync_service.find_changes(root)
    display_changes(str(root), changes, root.resolve(), verbose)


@app.command()
def status(
    ctx: typer.Context,
    root: Path = typer.Argument(..., help="Directory to check"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed file information"),
):
    """Show sync status between files under ROOT and the index."""
    try:
        asyncio.run(run_status(ctx.obj, root, verbose))
    except Exception as e:
        logger.exception(f"Error checking status: {e}")
        typer.echo(f"Error checking status: {e}", err=True)
        raise typer.Exit(1)
