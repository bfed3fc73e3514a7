"""Service for reorganizing a directory tree by dominant tag."""

from pathlib import Path
from typing import Tuple

import logfire
from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.models import ExecutionMode, ExecutionReport, MovePlan
from cognifs.organizer.cluster import TagClusterer
from cognifs.organizer.mover import SafeMover
from cognifs.organizer.naming import FolderNameGenerator
from cognifs.organizer.planner import ReorganizationPlanner
from cognifs.services.exceptions import IndexConnectionError
from cognifs.services.tagging_service import TaggingService
from cognifs.sync.protection import ProtectedZoneDetector
from cognifs.sync.scanner import Scanner
from cognifs.sync.sync_service import SyncService


class OrganizeService:
    """Scan, tag, cluster, name, plan and move, then bring the index up to date."""

    def __init__(
        self,
        scanner: Scanner,
        detector: ProtectedZoneDetector,
        tagging: TaggingService,
        clusterer: TagClusterer,
        namer: FolderNameGenerator,
        mover: SafeMover,
        sync_service: SyncService,
        config: CognifsConfig,
    ):
        self.scanner = scanner
        self.detector = detector
        self.tagging = tagging
        self.clusterer = clusterer
        self.namer = namer
        self.mover = mover
        self.sync_service = sync_service
        self.config = config

    async def plan(self, directory: Path) -> MovePlan:
        """
        Build a move plan for directory without touching it.

        Raises:
            RootUnreadable: If directory cannot be listed
        """
        scan = await self.scanner.scan_directory(directory)
        protection = self.detector.detect(scan.root, scan.records, scan.directories)

        candidates = [
            record for path, record in scan.records.items() if not protection.is_protected(path)
        ]
        tagged = await self.tagging.tag_files(candidates)
        clusters = self.clusterer.cluster(tagged.values())

        self.namer.reset()
        self.namer.assign(clusters)

        planner = ReorganizationPlanner(scan.root)
        return planner.plan(scan.records, clusters, protection)

    async def organize(
        self, directory: Path, mode: ExecutionMode, confirmed: bool = False
    ) -> Tuple[MovePlan, ExecutionReport]:
        """
        Plan and preview or apply a reorganization of directory.

        Returns:
            The plan, with statuses updated by the run, and its report

        Raises:
            RootUnreadable: If directory cannot be listed
            ConfirmationRequired: Apply mode without confirmation
        """
        with logfire.span("organize", directory=str(directory), mode=mode.value):
            plan = await self.plan(directory)
            report = await self.execute(plan, mode, confirmed=confirmed)
            return plan, report

    async def execute(
        self, plan: MovePlan, mode: ExecutionMode, confirmed: bool = False
    ) -> ExecutionReport:
        """
        Run an existing plan, re-syncing the index after an apply that moved files.

        Raises:
            ConfirmationRequired: Apply mode without confirmation
        """
        report = await self.mover.execute(plan, mode, confirmed=confirmed)
        if mode == ExecutionMode.APPLY and report.moved:
            await self.reindex(plan.root, report)
        return report

    async def reindex(self, root: Path, report: ExecutionReport) -> None:
        """Sync the index after moves; an unreachable index is logged, not raised."""
        try:
            sync_report = await self.sync_service.sync(root)
        except IndexConnectionError as e:
            logger.error(f"Files were moved but the index could not be updated: {e}")
            return

        diff = sync_report.diff
        report.added = len(diff.to_add)
        report.updated = len(diff.to_update)
        report.removed = len(diff.to_remove)
        report.unchanged = len(diff.unchanged)
