"""Types and utilities for file sync."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Set

from cognifs.models import FileRecord


@dataclass
class ScanResult:
    """Result of scanning a directory."""

    root: Path
    # path -> record
    records: Dict[Path, FileRecord] = field(default_factory=dict)
    # path -> error message
    errors: Dict[Path, str] = field(default_factory=dict)
    # every directory visited, root included
    directories: Set[Path] = field(default_factory=set)


@dataclass
class SyncDiff:
    """Classification of every known path against the last index snapshot.

    Attributes:
        to_add: Files on disk but not in the index
        to_update: Files in both whose content changed
        to_remove: Files in the index but no longer on disk
        unchanged: Files in both with identical content
        checksums: Current content hashes for files on disk
    """

    to_add: Set[Path] = field(default_factory=set)
    to_update: Set[Path] = field(default_factory=set)
    to_remove: Set[Path] = field(default_factory=set)
    unchanged: Set[Path] = field(default_factory=set)
    checksums: Dict[Path, str] = field(default_factory=dict)

    @property
    def total_changes(self) -> int:
        """Total number of files that need attention."""
        return len(self.to_add) + len(self.to_update) + len(self.to_remove)

    @property
    def total(self) -> int:
        return self.total_changes + len(self.unchanged)


@dataclass
class SyncReport:
    """Outcome of one sync pass.

    Attributes:
        diff: What changed relative to the index
        errors: Files skipped during the scan or rejected by the index
        degraded: Files indexed with fallback tags after a provider failure
        protected: Files left out of the index because they sit in a protected zone
    """

    diff: SyncDiff = field(default_factory=SyncDiff)
    errors: Dict[Path, str] = field(default_factory=dict)
    degraded: Set[Path] = field(default_factory=set)
    protected: Set[Path] = field(default_factory=set)

    @property
    def total_changes(self) -> int:
        return self.diff.total_changes
