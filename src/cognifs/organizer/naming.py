"""Folder names for clusters."""

from typing import Iterable, List, Set

from cognifs.config import CognifsConfig
from cognifs.models import Cluster
from cognifs.utils import sanitize_name


class FolderNameGenerator:
    """
    Turns cluster tags into unique, filesystem-safe folder names.

    Names are unique within a run, compared case-insensitively; a repeated
    name gets `_1`, `_2`, ... appended. Call reset() before naming another set
    of clusters.
    """

    def __init__(self, config: CognifsConfig):
        self.config = config
        self._used: Set[str] = set()

    def reset(self) -> None:
        self._used.clear()

    def base_name(self, tag: str) -> str:
        """Sanitized, truncated name for a tag, before collision handling."""
        separator = self.config.folder_separator
        name = sanitize_name(tag, separator)
        name = name[: self.config.max_folder_name_length].strip(separator)
        return name or sanitize_name(self.config.fallback_cluster, separator)

    def name(self, cluster: Cluster) -> str:
        """Generate and reserve a name for cluster."""
        separator = self.config.folder_separator
        base = self.base_name(cluster.tag)
        candidate = base
        counter = 0
        while candidate.lower() in self._used:
            counter += 1
            suffix = f"_{counter}"
            stem = base[: self.config.max_folder_name_length - len(suffix)].rstrip(separator)
            candidate = stem + suffix
        self._used.add(candidate.lower())
        return candidate

    def assign(self, clusters: Iterable[Cluster]) -> List[Cluster]:
        """Fill in folder_name for each cluster, in order."""
        clusters = list(clusters)
        for cluster in clusters:
            cluster.folder_name = self.name(cluster)
        return clusters
