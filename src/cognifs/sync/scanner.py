"""Filesystem scanner producing FileRecords."""

import asyncio
import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Set, Tuple

from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.file_utils import build_file_record, is_relative_to
from cognifs.models import FileRecord
from cognifs.services.exceptions import RootUnreadable, ScanError
from cognifs.sync.utils import ScanResult


class Scanner:
    """
    Walks a directory tree and fingerprints every regular file.

    Symlinked directories are followed only when they lead outside the root and
    not back into it or one of its ancestors, so every file is reached by
    exactly one path and the walk always terminates.
    """

    def __init__(self, config: CognifsConfig):
        self.config = config

    @staticmethod
    def resolve_root(root: Path) -> Path:
        """
        Normalize the scan root and make sure it can be listed.

        Raises:
            RootUnreadable: If the root is missing, not a directory or unreadable
        """
        try:
            resolved = Path(root).expanduser().resolve(strict=True)
        except OSError as e:
            raise RootUnreadable(f"Cannot resolve scan root {root}: {e}") from e

        if not resolved.is_dir():
            raise RootUnreadable(f"Scan root is not a directory: {resolved}")

        try:
            with os.scandir(resolved):
                pass
        except OSError as e:
            raise RootUnreadable(f"Cannot list scan root {resolved}: {e}") from e

        return resolved

    def walk(
        self, root: Path, on_directory: Optional[Callable[[Path], None]] = None
    ) -> Iterator[Tuple[Path, Optional[ScanError]]]:
        """
        Lazily walk root, yielding `(path, None)` for files and
        `(path, ScanError)` for entries that could not be read.

        Each call starts a fresh walk.

        Args:
            root: Directory to walk
            on_directory: Called with every directory entered, root included
        """
        root = self.resolve_root(root)
        visited: Set[Tuple[int, int]] = set()
        stack: List[Path] = [root]

        while stack:
            directory = stack.pop()
            try:
                stats = directory.stat()
            except OSError as e:
                yield directory, ScanError(directory, str(e))
                continue

            key = (stats.st_dev, stats.st_ino)
            if key in visited:
                continue
            visited.add(key)

            if on_directory is not None:
                on_directory(directory)

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.warning(f"Cannot list directory {directory}: {e}")
                yield directory, ScanError(directory, str(e))
                continue

            subdirs = []
            for entry in entries:
                path = directory / entry.name
                try:
                    if entry.is_dir():
                        if entry.is_symlink() and not self._follow_link(path, root):
                            logger.debug(f"Not following directory link: {path}")
                            continue
                        subdirs.append(path)
                    elif entry.is_file():
                        if entry.name in self.config.ignore_names:
                            continue
                        yield path, None
                except OSError as e:
                    yield path, ScanError(path, str(e))

            # reversed so the stack pops in name order
            stack.extend(reversed(subdirs))

    @staticmethod
    def _follow_link(link: Path, root: Path) -> bool:
        """Follow a directory link only when it leaves the tree for good."""
        try:
            target = link.resolve(strict=True)
        except OSError:
            return False
        # target inside the root is reachable by its real path; an ancestor loops
        return not is_relative_to(target, root) and not is_relative_to(root, target)

    def iter_records(self, root: Path) -> Iterator[FileRecord]:
        """
        Lazily yield a FileRecord per readable file.

        Unreadable entries are logged and left out.
        """
        for path, error in self.walk(root):
            if error is not None:
                logger.warning(f"Skipping {error}")
                continue
            try:
                yield build_file_record(path, self.config.hash_chunk_size)
            except OSError as e:
                logger.warning(f"Skipping {path}: {e}")

    async def scan_directory(self, directory: Path) -> ScanResult:
        """
        Scan directory and fingerprint every file.

        Hashing runs in worker threads, at most `scan_workers` at a time.

        Args:
            directory: Directory to scan

        Returns:
            ScanResult containing found files and any errors

        Raises:
            RootUnreadable: If directory itself cannot be read
        """
        root = self.resolve_root(directory)
        logger.debug(f"Scanning directory: {root}")
        result = ScanResult(root=root)

        entries = await asyncio.to_thread(
            lambda: list(self.walk(root, on_directory=result.directories.add))
        )

        paths = []
        for path, error in entries:
            if error is not None:
                result.errors[path] = error.message
            else:
                paths.append(path)

        semaphore = asyncio.Semaphore(self.config.scan_workers)

        async def fingerprint(path: Path) -> None:
            async with semaphore:
                try:
                    record = await asyncio.to_thread(
                        build_file_record, path, self.config.hash_chunk_size
                    )
                except OSError as e:
                    logger.warning(f"Failed to read {path}: {e}")
                    result.errors[path] = str(e)
                    return
                result.records[path] = record

        await asyncio.gather(*(fingerprint(path) for path in paths))

        logger.debug(f"Found {len(result.records)} files in {root}")
        if result.errors:
            logger.warning(f"Encountered {len(result.errors)} errors while scanning")

        return result
