"""Main CLI entry point for cognifs."""  # pragma: no cover

from cognifs.cli.app import app  # pragma: no cover

# Register commands
from cognifs.cli.commands import organize, search, status, sync, watch  # pragma: no cover

__all__ = ["app", "organize", "search", "status", "sync", "watch"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
