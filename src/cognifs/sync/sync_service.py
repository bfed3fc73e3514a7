"""Service for syncing the search index with the filesystem."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import logfire
from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.file_utils import is_relative_to
from cognifs.models import FileRecord, IndexedDocument
from cognifs.providers.base import IndexClient
from cognifs.services.exceptions import RejectedDocument
from cognifs.services.tagging_service import TaggingService
from cognifs.sync.protection import ProtectedZoneDetector, ProtectionMap
from cognifs.sync.scanner import Scanner
from cognifs.sync.sync_diff import SyncDiffEngine
from cognifs.sync.utils import ScanResult, SyncReport

UPSERT_BATCH_SIZE = 500


class SyncService:
    """Keeps the index in step with the files under a root.

    The filesystem is the source of truth. Each pass scans the tree, drops files
    inside protected zones, diffs what is left against the index snapshot, tags
    new and changed files, then upserts and deletes. A pass is safe to repeat:
    if the index fails half way, the next pass re-derives the same diff.
    """

    def __init__(
        self,
        scanner: Scanner,
        detector: ProtectedZoneDetector,
        tagging: TaggingService,
        index: IndexClient,
        config: CognifsConfig,
        diff_engine: Optional[SyncDiffEngine] = None,
    ):
        self.scanner = scanner
        self.detector = detector
        self.tagging = tagging
        self.index = index
        self.config = config
        self.diff_engine = diff_engine or SyncDiffEngine()

    async def scan(self, directory: Path) -> Tuple[ScanResult, ProtectionMap]:
        """Scan directory and detect its protected zones."""
        scan = await self.scanner.scan_directory(directory)
        protection = self.detector.detect(scan.root, scan.records, scan.directories)
        return scan, protection

    async def find_changes(self, directory: Path) -> SyncReport:
        """
        Compare the filesystem against the index without writing anything.

        Raises:
            RootUnreadable: If directory cannot be listed
            IndexConnectionError: If the index cannot be reached
        """
        report, _ = await self._prepare(directory)
        return report

    async def _prepare(self, directory: Path) -> Tuple[SyncReport, Dict[Path, FileRecord]]:
        scan, protection = await self.scan(directory)
        report = SyncReport(errors=dict(scan.errors))

        records: Dict[Path, FileRecord] = {}
        for path, record in scan.records.items():
            if not self.config.index_protected and protection.is_protected(path):
                report.protected.add(path)
            else:
                records[path] = record
        if report.protected:
            logger.debug(f"Leaving {len(report.protected)} protected files out of the index")

        snapshot = [
            doc for doc in await self.index.snapshot() if is_relative_to(doc.path, scan.root)
        ]
        report.diff = self.diff_engine.diff(records.values(), snapshot)
        return report, records

    async def sync(self, directory: Path) -> SyncReport:
        """
        Sync all files under directory with the index.

        Raises:
            RootUnreadable: If directory cannot be listed
            IndexConnectionError: If the index cannot be reached; the pass can be
                retried as a whole
        """
        with logfire.span("sync", directory=str(directory)):
            report, records = await self._prepare(directory)
            diff = report.diff
            logger.info(f"Found {diff.total_changes} changes in {directory}")

            changed = [records[path] for path in sorted(diff.to_add | diff.to_update)]
            if changed:
                tagged = await self.tagging.tag_files(changed)
                report.degraded = {path for path, tags in tagged.items() if tags.degraded}
                documents = [
                    IndexedDocument.from_record(
                        record, tagged[record.path].tags, tagged[record.path].embedding
                    )
                    for record in changed
                ]
                await self.upsert(documents, report)

            if diff.to_remove:
                logger.debug(f"Removing {len(diff.to_remove)} documents from the index")
                await self.index.delete(sorted(diff.to_remove))

            logger.info(
                f"Synced {directory}: {len(diff.to_add)} added, {len(diff.to_update)} updated, "
                f"{len(diff.to_remove)} removed, {len(diff.unchanged)} unchanged"
            )
            return report

    async def upsert(self, documents: List[IndexedDocument], report: SyncReport) -> None:
        """Upsert in batches, recording rejected documents as errors."""
        for start in range(0, len(documents), UPSERT_BATCH_SIZE):
            batch = documents[start : start + UPSERT_BATCH_SIZE]
            try:
                await self.index.upsert(batch)
            except RejectedDocument as e:
                logger.error(f"Index rejected documents: {e}")
                for path in e.paths or [doc.path for doc in batch]:
                    report.errors[path] = str(e)
