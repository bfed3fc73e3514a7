"""Search command for cognifs CLI."""

import asyncio
from typing import List

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from cognifs.cli.app import app
from cognifs.cli.commands.command_utils import get_services
from cognifs.config import CognifsConfig
from cognifs.models import IndexedDocument

console = Console()


def results_table(query: str, documents: List[IndexedDocument]) -> Table:
    table = Table(title=f"Results for '{query}'", title_justify="left")
    table.add_column("Path", style="cyan", no_wrap=True)
    table.add_column("Tags", style="green")
    table.add_column("Size", justify="right")
    for doc in documents:
        table.add_row(str(doc.path), ", ".join(sorted(doc.tags)), str(doc.size))
    return table


async def run_search(config: CognifsConfig, query: str, limit: int) -> List[IndexedDocument]:
    async with get_services(config) as services:
        return await services.index.search(query, limit=limit)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Words to look for in file names and tags"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Maximum number of results"),
) -> None:
    """Search the index."""
    try:
        documents = asyncio.run(run_search(ctx.obj, query, limit))
    except Exception as e:
        logger.exception("Search failed")
        typer.echo(f"Error during search: {e}", err=True)
        raise typer.Exit(1)

    if not documents:
        console.print(f"[yellow]No results for '{query}'[/yellow]")
        return
    console.print(results_table(query, documents))
