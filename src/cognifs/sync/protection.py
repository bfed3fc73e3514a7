"""Detection of directories that belong to foreign projects or tools."""

from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set

from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.models import ProtectedZone, ProtectionReason


class ProtectionMap:
    """Protected zones found in one scan, with ancestor lookups."""

    def __init__(self, root: Path, zones: Iterable[ProtectedZone] = ()):
        self.root = root
        self._zones: Dict[Path, ProtectedZone] = {zone.path: zone for zone in zones}

    def add(self, zone: ProtectedZone) -> None:
        self._zones[zone.path] = zone

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self) -> Iterator[ProtectedZone]:
        return iter(self.zones)

    @property
    def zones(self) -> List[ProtectedZone]:
        return sorted(self._zones.values(), key=lambda z: str(z.path))

    def zone_for(self, path: Path) -> Optional[ProtectedZone]:
        """The zone covering path, or None. Checks path itself, then its ancestors."""
        if path in self._zones:
            return self._zones[path]
        for parent in path.parents:
            if parent in self._zones:
                return self._zones[parent]
            if parent == self.root:
                break
        return None

    def is_protected(self, path: Path) -> bool:
        return self.zone_for(path) is not None


class ProtectedZoneDetector:
    """
    Flags directory subtrees that must never be reorganized.

    Directories are evaluated shallowest first. A directory is protected when
    - its name is a dependency/vcs marker (`node_modules`, `.venv`, `.git`, ...)
    - its name ends with an application bundle suffix (`.app`, `.xcodeproj`, ...)
      or an installer package suffix (`.pkg`, `.deb`, `.rpm`)
    - it contains a vcs marker, as a directory or as a file (worktrees, submodules)
    - it contains a project bundle (`Foo.xcodeproj`, `Foo.xcworkspace`)
    - it contains a project manifest file (`package.json`, `Cargo.toml`, ...)
    Installer package files are protected on their own wherever they are.
    Once a directory is protected its subtree is not evaluated again. The scan
    root itself is never protected; markers directly under it protect only
    themselves.
    """

    def __init__(self, config: CognifsConfig):
        self.config = config

    def detect(
        self, root: Path, files: Iterable[Path], directories: Iterable[Path] = ()
    ) -> ProtectionMap:
        """
        Find protected zones among scanned paths.

        Args:
            root: Scan root
            files: Scanned file paths
            directories: Directories seen by the scanner, including empty ones

        Returns:
            ProtectionMap for the scan
        """
        files = list(files)
        dirs: Set[Path] = {d for d in directories if d == root or root in d.parents}
        child_files: Dict[Path, Set[str]] = defaultdict(set)

        for path in files:
            child_files[path.parent].add(path.name)
            for parent in path.parents:
                if parent != root and root not in parent.parents:
                    break
                dirs.add(parent)
                if parent == root:
                    break

        child_dirs: Dict[Path, Set[str]] = defaultdict(set)
        for directory in dirs:
            if directory != root:
                child_dirs[directory.parent].add(directory.name)

        protection = ProtectionMap(root)
        for directory in sorted(dirs, key=lambda d: (len(d.parts), str(d))):
            if protection.is_protected(directory):
                continue
            zone = self._match(
                directory, directory == root, child_dirs[directory], child_files[directory]
            )
            if zone is not None:
                logger.debug(f"Protected {zone.path} ({zone.reason.value}: {zone.marker})")
                protection.add(zone)

        for path in sorted(files, key=str):
            suffix = self._suffix(path.name, self.config.installer_suffixes)
            if suffix and root in path.parents and not protection.is_protected(path):
                logger.debug(f"Protected package file {path}")
                protection.add(
                    ProtectedZone(path=path, reason=ProtectionReason.PACKAGE, marker=suffix)
                )

        logger.info(f"Found {len(protection)} protected zones under {root}")
        return protection

    def _match(
        self, directory: Path, is_root: bool, subdirs: Set[str], files: Set[str]
    ) -> Optional[ProtectedZone]:
        if is_root:
            return None

        name = directory.name
        if name in self.config.vcs_markers:
            return ProtectedZone(path=directory, reason=ProtectionReason.VCS, marker=name)
        if name in self.config.protected_dir_markers:
            return ProtectedZone(path=directory, reason=ProtectionReason.DEPENDENCY, marker=name)
        suffix = self._suffix(name, self.config.bundle_suffixes)
        if suffix:
            return ProtectedZone(path=directory, reason=ProtectionReason.BUNDLE, marker=suffix)
        suffix = self._suffix(name, self.config.installer_suffixes)
        if suffix:
            return ProtectedZone(path=directory, reason=ProtectionReason.PACKAGE, marker=suffix)

        # a `.git` file marks a worktree or submodule checkout
        vcs = sorted((subdirs | files) & self.config.vcs_markers)
        if vcs:
            return ProtectedZone(path=directory, reason=ProtectionReason.VCS, marker=vcs[0])

        project_bundles = self.config.project_bundle_suffixes
        bundles = sorted(d for d in subdirs if self._suffix(d, project_bundles))
        if bundles:
            return ProtectedZone(
                path=directory, reason=ProtectionReason.PROJECT_CONFIG, marker=bundles[0]
            )

        manifests = sorted(files & self.config.project_manifests)
        if manifests:
            return ProtectedZone(
                path=directory, reason=ProtectionReason.PROJECT_CONFIG, marker=manifests[0]
            )
        return None

    @staticmethod
    def _suffix(name: str, suffixes: Iterable[str]) -> Optional[str]:
        """The suffix name ends with, ignoring a bare `.app` style name."""
        for suffix in suffixes:
            if name.endswith(suffix) and name != suffix:
                return suffix
        return None
