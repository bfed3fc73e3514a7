from pathlib import Path
from typing import Optional

import typer

from cognifs.config import load_config
from cognifs.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import cognifs

        typer.echo(f"cognifs version: {cognifs.__version__}")
        raise typer.Exit()


app = typer.Typer(name="cognifs")


@app.callback()
def app_callback(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a settings.toml file",
        envvar="COGNIFS_CONFIG",
        exists=True,
        dir_okay=False,
    ),
    verbose_logs: bool = typer.Option(
        False, "--log-console", help="Also write log messages to stderr."
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """cognifs - semantic file indexing and tag-driven reorganization."""
    config = load_config(config_file)
    setup_logging(
        config.home, log_file=config.log_file, log_level=config.log_level, console=verbose_logs
    )
    ctx.obj = config
