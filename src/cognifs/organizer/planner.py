"""Reorganization planning: which file goes where."""

from pathlib import Path
from typing import Dict, Iterable, Optional, Set

from loguru import logger

from cognifs.file_utils import is_relative_to
from cognifs.models import Cluster, MoveEntry, MovePlan, MoveStatus, SkipReason
from cognifs.sync.protection import ProtectionMap


def with_suffix_counter(path: Path, counter: int) -> Path:
    """`a.pdf` -> `a_1.pdf`; only the last suffix is kept after the counter."""
    return path.with_name(f"{path.stem}_{counter}{path.suffix}")


class ReorganizationPlanner:
    """
    Builds an exhaustive, deterministic MovePlan.

    Every file gets one entry. Files that physically live outside the root
    (reached through a directory symlink), files in protected zones and files
    without a cluster are skipped, files already in place are no-ops, and
    everything else is planned into `root/<folder_name>/<filename>`. A destination that is
    taken, by an earlier entry, by a file staying in place or by a file on
    disk, gets a numeric suffix instead. Nothing is ever overwritten.
    """

    def __init__(self, root: Path):
        self.root = root
        self._real_root = root.resolve()

    def plan(
        self,
        paths: Iterable[Path],
        clusters: Iterable[Cluster],
        protection: Optional[ProtectionMap] = None,
    ) -> MovePlan:
        """
        Plan moves for paths.

        Args:
            paths: Every scanned file
            clusters: Named clusters; folder_name must be set
            protection: Protected zones of the scan

        Returns:
            MovePlan with entries sorted by source path
        """
        folders: Dict[Path, str] = {}
        for cluster in clusters:
            if not cluster.folder_name:
                raise ValueError(f"Cluster '{cluster.tag}' has no folder name")
            for path in cluster.paths:
                folders[path] = cluster.folder_name

        sources = sorted(set(paths), key=str)
        entries: Dict[Path, MoveEntry] = {}

        # skips first, so files that stay put are known before any destination is chosen
        for source in sources:
            if not self.is_inside_root(source):
                entries[source] = self._skip(source, source, SkipReason.OUTSIDE_ROOT)
            elif protection is not None and protection.is_protected(source):
                entries[source] = self._skip(source, source, SkipReason.PROTECTED)
            elif source not in folders:
                entries[source] = self._skip(source, source, SkipReason.UNCLUSTERED)
            else:
                destination = self.destination(source, folders[source])
                if destination == source:
                    entries[source] = self._skip(source, destination, SkipReason.NO_OP)

        claimed: Set[Path] = set(entries)
        for source in sources:
            if source in entries:
                continue
            destination = self.resolve_collision(self.destination(source, folders[source]), claimed)
            claimed.add(destination)
            entries[source] = MoveEntry(source_path=source, destination_path=destination)

        plan = MovePlan(root=self.root, entries=[entries[source] for source in sources])
        logger.info(
            f"Planned {len(plan.planned)} moves, "
            f"{len(plan.by_status(MoveStatus.SKIPPED))} skipped, under {self.root}"
        )
        return plan

    def destination(self, source: Path, folder_name: str) -> Path:
        if folder_name in ("", ".", "..") or Path(folder_name).name != folder_name:
            raise ValueError(f"Invalid folder name {folder_name!r}")
        destination = self.root / folder_name / source.name
        if not is_relative_to(destination, self.root):
            raise ValueError(f"Folder name {folder_name!r} leaves {self.root}")
        return destination

    def is_inside_root(self, source: Path) -> bool:
        """True when source is physically under the root once its directories are resolved."""
        real = source.parent.resolve() / source.name
        return is_relative_to(real, self._real_root)

    @staticmethod
    def resolve_collision(destination: Path, claimed: Set[Path]) -> Path:
        """First free variant of destination: itself, then `_1`, `_2`, ..."""
        candidate = destination
        counter = 0
        while candidate in claimed or candidate.exists():
            counter += 1
            candidate = with_suffix_counter(destination, counter)
        if counter:
            logger.debug(f"{destination} is taken, using {candidate.name}")
        return candidate

    @staticmethod
    def _skip(source: Path, destination: Path, reason: SkipReason) -> MoveEntry:
        logger.debug(f"Skipping {source}: {reason.value}")
        return MoveEntry(
            source_path=source,
            destination_path=destination,
            status=MoveStatus.SKIPPED,
            reason=reason.value,
        )
