"""Execution of move plans."""

import asyncio
import errno
import os
import shutil
import threading
from collections import defaultdict
from pathlib import Path
from typing import Dict, List

from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.file_utils import is_relative_to
from cognifs.models import ExecutionMode, ExecutionReport, MoveEntry, MovePlan, MoveStatus
from cognifs.services.exceptions import ConfirmationRequired, MoveFailed


class SafeMover:
    """
    Carries out a MovePlan, or reports what it would do.

    Apply runs are gated on confirmation before anything is touched. Moves into
    the same directory run one after another; different destination
    directories are handled concurrently, at most `move_workers` at a time. A
    failed entry is recorded and the rest of the plan carries on. An existing
    destination is never overwritten.
    """

    def __init__(self, config: CognifsConfig):
        self.config = config

    async def execute(
        self, plan: MovePlan, mode: ExecutionMode, confirmed: bool = False
    ) -> ExecutionReport:
        """
        Execute or preview plan.

        Args:
            plan: Plan to execute; entry statuses are updated in place
            mode: PREVIEW leaves the filesystem untouched
            confirmed: The user approved the moves

        Returns:
            ExecutionReport with per-status counts, skips and failures

        Raises:
            ConfirmationRequired: Apply mode without confirmation
        """
        if mode == ExecutionMode.PREVIEW:
            logger.info(f"Preview: {len(plan.planned)} files would be moved")
            return ExecutionReport.from_plan(plan, mode)

        if not (confirmed or self.config.skip_confirmation):
            raise ConfirmationRequired(
                f"Moving {len(plan.planned)} files under {plan.root} requires confirmation"
            )

        for entry in plan.planned:
            entry.mark(MoveStatus.CONFIRMED)

        groups: Dict[Path, List[MoveEntry]] = defaultdict(list)
        for entry in plan.by_status(MoveStatus.CONFIRMED):
            groups[entry.destination_path.parent].append(entry)

        stop = threading.Event()
        semaphore = asyncio.Semaphore(self.config.move_workers)

        async def run_group(entries: List[MoveEntry]) -> None:
            async with semaphore:
                await asyncio.to_thread(self._move_group, plan.root, entries, stop)

        try:
            await asyncio.gather(*(run_group(entries) for _, entries in sorted(groups.items())))
        except asyncio.CancelledError:
            # unstarted entries stay confirmed and their files stay where they are
            stop.set()
            logger.warning("Move run cancelled")
            raise

        report = ExecutionReport.from_plan(plan, mode)
        logger.info(f"Moved {report.moved} files, {report.failed} failed, {report.skipped} skipped")
        return report

    def _move_group(self, root: Path, entries: List[MoveEntry], stop: threading.Event) -> None:
        for entry in entries:
            if stop.is_set():
                return
            try:
                self.move(root, entry)
            except MoveFailed as e:
                logger.error(str(e))
                entry.mark(MoveStatus.FAILED, e.reason)
            else:
                entry.mark(MoveStatus.MOVED)

    @staticmethod
    def move(root: Path, entry: MoveEntry) -> None:
        """
        Move one file, never overwriting.

        Raises:
            MoveFailed: With a reason for the report
        """
        source, destination = entry.source_path, entry.destination_path
        if not (is_relative_to(source, root) and is_relative_to(destination, root)):
            raise MoveFailed(source, "outside root")
        # a directory symlink can put a file under root that lives elsewhere
        real_root = root.resolve()
        if not is_relative_to(source.parent.resolve(), real_root):
            raise MoveFailed(source, "outside root")
        if not os.path.lexists(source):
            raise MoveFailed(source, "source vanished")
        if os.path.lexists(destination):
            raise MoveFailed(source, "destination exists")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            try:
                os.rename(source, destination)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                shutil.move(str(source), str(destination))
        except FileNotFoundError as e:
            raise MoveFailed(source, "source vanished") from e
        except PermissionError as e:
            raise MoveFailed(source, f"permission denied: {e.strerror}") from e
        except OSError as e:
            raise MoveFailed(source, e.strerror or str(e)) from e

        logger.debug(f"Moved {source} -> {destination}")
