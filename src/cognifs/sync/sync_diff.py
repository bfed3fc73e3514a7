"""Change detection between a scan and the last index snapshot."""

from pathlib import Path
from typing import Dict, Iterable

from loguru import logger

from cognifs.models import FileRecord, IndexedDocument
from cognifs.sync.utils import SyncDiff


class SyncDiffEngine:
    """
    Classifies every path as added, updated, removed or unchanged.

    The filesystem is treated as the source of truth and content hashes as the
    authority on change: a file whose hash matches the snapshot is unchanged
    even if its timestamps moved. Timestamps are only compared when the
    snapshot has no hash for the file.

    diff() is pure. It never touches the index, so a failed upsert or delete can
    be retried by diffing again.
    """

    def diff(
        self, current: Iterable[FileRecord], previous: Iterable[IndexedDocument]
    ) -> SyncDiff:
        """
        Compare current scan records against the previous snapshot.

        Args:
            current: Records from the latest scan
            previous: Documents from the index

        Returns:
            SyncDiff partitioning the union of both path sets
        """
        current_files: Dict[Path, FileRecord] = {r.path: r for r in current}
        indexed: Dict[Path, IndexedDocument] = {d.path: d for d in previous}

        result = SyncDiff()

        # Find new and modified files
        for path, record in current_files.items():
            result.checksums[path] = record.content_hash
            document = indexed.get(path)
            if document is None:
                result.to_add.add(path)
            elif self.has_changed(record, document):
                result.to_update.add(path)
            else:
                result.unchanged.add(path)

        # Find deleted files
        result.to_remove = {path for path in indexed if path not in current_files}

        logger.debug(
            f"Found {len(result.to_add)} new, {len(result.to_update)} modified, "
            f"{len(result.to_remove)} deleted and {len(result.unchanged)} unchanged files"
        )
        return result

    @staticmethod
    def has_changed(record: FileRecord, document: IndexedDocument) -> bool:
        """True when the file on disk no longer matches the indexed document."""
        if record.content_hash and document.content_hash:
            return record.content_hash != document.content_hash
        return record.modified_at != document.modified_at
