"""CLI commands for cognifs."""

from . import organize, search, status, sync, watch

__all__ = ["organize", "search", "status", "sync", "watch"]
