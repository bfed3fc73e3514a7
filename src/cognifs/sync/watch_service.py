"""Watch service for cognifs."""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field
from rich.console import Console
from watchfiles import Change, awatch

from cognifs.config import CognifsConfig
from cognifs.file_utils import ensure_directory, write_file_atomic
from cognifs.services.exceptions import IndexConnectionError
from cognifs.sync.sync_service import SyncService
from cognifs.sync.utils import SyncReport

console = Console()

MAX_RECENT_EVENTS = 100


class WatchEvent(BaseModel):
    timestamp: datetime
    path: str
    action: str  # new, modified, deleted, sync
    status: str  # success, error
    checksum: Optional[str] = None
    error: Optional[str] = None


class WatchServiceState(BaseModel):
    # Service status
    running: bool = False
    root: Optional[Path] = None
    start_time: datetime = Field(default_factory=datetime.now)
    pid: int = Field(default_factory=os.getpid)

    # Stats
    error_count: int = 0
    last_error: Optional[datetime] = None
    last_scan: Optional[datetime] = None

    # File counts
    synced_files: int = 0

    # Recent activity
    recent_events: List[WatchEvent] = Field(default_factory=list)

    def add_event(
        self,
        path: str,
        action: str,
        status: str,
        checksum: Optional[str] = None,
        error: Optional[str] = None,
    ) -> WatchEvent:
        event = WatchEvent(
            timestamp=datetime.now(),
            path=path,
            action=action,
            status=status,
            checksum=checksum,
            error=error,
        )
        self.recent_events.insert(0, event)
        self.recent_events = self.recent_events[:MAX_RECENT_EVENTS]
        return event

    def record_error(self, error: str):
        self.error_count += 1
        self.add_event(path="", action="sync", status="error", error=error)
        self.last_error = datetime.now()


class WatchService:
    """Re-syncs the index whenever files under root change."""

    def __init__(self, sync_service: SyncService, config: CognifsConfig, root: Path):
        self.sync_service = sync_service
        self.config = config
        self.root = root
        self.state = WatchServiceState(root=root)
        self.status_path = config.watch_status_path
        ensure_directory(self.status_path.parent)

    async def run(self):
        """Watch for file changes and sync them"""
        self.state.running = True
        self.state.start_time = datetime.now()
        await self.write_status()

        console.print(f"\n[cyan]Watching {self.root} for changes...[/cyan]")
        try:
            async for changes in awatch(
                self.root,
                watch_filter=self.filter_changes,
                debounce=self.config.sync_delay,
                recursive=True,
            ):
                logger.debug(f"Received {len(changes)} filesystem changes")
                # just sync the whole tree
                await self.handle_changes(self.root)

        except Exception as e:
            self.state.record_error(str(e))
            await self.write_status()
            raise
        finally:
            self.state.running = False
            await self.write_status()

    async def write_status(self):
        """Write current state to status file"""
        write_file_atomic(self.status_path, self.state.model_dump_json(indent=2))

    def filter_changes(self, change: Change, path: str) -> bool:
        """Ignore OS metadata files and anything inside a version-control directory."""
        parts = Path(path).parts
        if Path(path).name in self.config.ignore_names:
            return False
        return not any(part in self.config.vcs_markers for part in parts)

    async def handle_changes(self, directory: Path) -> Optional[SyncReport]:
        """Process a batch of file changes"""

        logger.debug(f"handling change in directory: {directory} ...")
        try:
            report = await self.sync_service.sync(directory)
        except IndexConnectionError as e:
            # keep watching, the next batch retries the whole pass
            logger.error(f"Sync of {directory} failed: {e}")
            self.state.record_error(str(e))
            console.print(f"[red]Sync failed:[/red] {e}")
            await self.write_status()
            return None

        self.state.last_scan = datetime.now()
        self.state.synced_files = report.diff.total

        diff = report.diff
        for path in sorted(diff.to_add):
            event = self.state.add_event(
                path=str(path), action="new", status="success", checksum=diff.checksums[path]
            )
            console.print(
                f"{event.timestamp.isoformat(timespec='minutes')} New:\t\t [green]{path}[/green] ({event.checksum[:8]})"
            )
        for path in sorted(diff.to_update):
            event = self.state.add_event(
                path=str(path), action="modified", status="success", checksum=diff.checksums[path]
            )
            console.print(
                f"{event.timestamp.isoformat(timespec='minutes')} Modified:\t [yellow]{path}[/yellow] ({event.checksum[:8]})"
            )
        for path in sorted(diff.to_remove):
            event = self.state.add_event(path=str(path), action="deleted", status="success")
            console.print(f"{event.timestamp.isoformat(timespec='minutes')} Deleted:\t [red]{path}[/red]")
        for path, error in sorted(report.errors.items()):
            self.state.error_count += 1
            event = self.state.add_event(path=str(path), action="sync", status="error", error=error)
            console.print(f"{event.timestamp.isoformat(timespec='minutes')} Error:\t [red]{path}[/red] {error}")

        await self.write_status()
        return report
