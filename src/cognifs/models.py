"""Core pydantic models for cognifs.

FileRecord and IndexedDocument describe a file as seen by the scanner and by the
search index. ProtectedZone, Cluster and the move plan types carry the state of a
reorganization pass from the detector through the planner to the mover.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FileRecord(BaseModel):
    """A regular file observed during one scan pass."""

    model_config = ConfigDict(frozen=True)

    path: Path
    size: int
    extension: str = ""
    created_at: datetime
    modified_at: datetime
    content_hash: str

    @property
    def name(self) -> str:
        return self.path.name


class IndexedDocument(BaseModel):
    """The last persisted state of a file, as stored by the index."""

    path: Path
    size: int = 0
    extension: str = ""
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    # Empty when the backing index does not store hashes
    content_hash: str = ""
    tags: Set[str] = Field(default_factory=set)
    embedding: Optional[List[float]] = None

    @classmethod
    def from_record(
        cls,
        record: FileRecord,
        tags: Optional[Set[str]] = None,
        embedding: Optional[List[float]] = None,
    ) -> "IndexedDocument":
        return cls(
            path=record.path,
            size=record.size,
            extension=record.extension,
            created_at=record.created_at,
            modified_at=record.modified_at,
            content_hash=record.content_hash,
            tags=set(tags or ()),
            embedding=embedding or None,
        )


class ProtectionReason(str, Enum):
    """Why a path was excluded from reorganization."""

    VCS = "vcs"
    DEPENDENCY = "dependency"
    BUNDLE = "bundle"
    PROJECT_CONFIG = "project_config"
    PACKAGE = "package"


class ProtectedZone(BaseModel):
    """A directory, or a single package file, whose whole subtree must never be touched."""

    model_config = ConfigDict(frozen=True)

    path: Path
    reason: ProtectionReason
    marker: str


class FileTags(BaseModel):
    """Tags and embedding derived for one file."""

    path: Path
    weights: Dict[str, float] = Field(default_factory=dict)
    embedding: Optional[List[float]] = None
    degraded: bool = False
    error: Optional[str] = None

    @property
    def tags(self) -> Set[str]:
        return set(self.weights)


class Cluster(BaseModel):
    """Files sharing a dominant tag, and the folder they will move into."""

    tag: str
    paths: List[Path] = Field(default_factory=list)
    folder_name: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.paths)


class MoveStatus(str, Enum):
    PLANNED = "planned"
    SKIPPED = "skipped"
    CONFIRMED = "confirmed"
    MOVED = "moved"
    FAILED = "failed"


class SkipReason(str, Enum):
    PROTECTED = "protected"
    NO_OP = "no-op"
    UNCLUSTERED = "unclustered"
    OUTSIDE_ROOT = "outside-root"


class MoveEntry(BaseModel):
    """One file in a move plan.

    Source and destination are fixed when the plan is generated; only status and
    reason change during execution.
    """

    source_path: Path = Field(frozen=True)
    destination_path: Path = Field(frozen=True)
    status: MoveStatus = MoveStatus.PLANNED
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_reason(self) -> "MoveEntry":
        if self.status in (MoveStatus.SKIPPED, MoveStatus.FAILED) and not self.reason:
            raise ValueError(f"status {self.status.value} requires a reason")
        return self

    def mark(self, status: MoveStatus, reason: Optional[str] = None) -> None:
        """Update status and reason together."""
        if status in (MoveStatus.SKIPPED, MoveStatus.FAILED) and not reason:
            raise ValueError(f"status {status.value} requires a reason")
        self.status = status
        self.reason = reason


class MovePlan(BaseModel):
    """Ordered move entries for one reorganization pass."""

    root: Path
    entries: List[MoveEntry] = Field(default_factory=list)

    def by_status(self, status: MoveStatus) -> List[MoveEntry]:
        return [e for e in self.entries if e.status == status]

    @property
    def planned(self) -> List[MoveEntry]:
        return self.by_status(MoveStatus.PLANNED)

    @property
    def destination_dirs(self) -> Set[Path]:
        """Directories that would receive at least one file."""
        return {e.destination_path.parent for e in self.planned}


class ExecutionMode(str, Enum):
    PREVIEW = "preview"
    APPLY = "apply"


class ReportItem(BaseModel):
    path: Path
    reason: str


class ExecutionReport(BaseModel):
    """Summary of a sync and/or reorganization run."""

    mode: ExecutionMode = ExecutionMode.PREVIEW
    added: int = 0
    updated: int = 0
    removed: int = 0
    unchanged: int = 0
    planned: int = 0
    moved: int = 0
    skipped: int = 0
    failed: int = 0
    skipped_items: List[ReportItem] = Field(default_factory=list)
    failures: List[ReportItem] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: MovePlan, mode: ExecutionMode) -> "ExecutionReport":
        """Count entry statuses and enumerate every skipped or failed entry."""
        report = cls(mode=mode)
        for entry in plan.entries:
            if entry.status == MoveStatus.SKIPPED:
                report.skipped += 1
                report.skipped_items.append(
                    ReportItem(path=entry.source_path, reason=entry.reason or "")
                )
            elif entry.status == MoveStatus.FAILED:
                report.failed += 1
                report.failures.append(ReportItem(path=entry.source_path, reason=entry.reason or ""))
            elif entry.status == MoveStatus.MOVED:
                report.moved += 1
            else:
                # planned in preview, confirmed if an apply run was interrupted
                report.planned += 1
        return report
