"""Grouping of tagged files into clusters by dominant tag."""

import math
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.models import Cluster, FileTags


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, 0.0 for mismatched or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def centroid(vectors: Sequence[Sequence[float]]) -> List[float]:
    """Component-wise mean of equal-length vectors."""
    if not vectors:
        return []
    dimension = len(vectors[0])
    total = [0.0] * dimension
    for vector in vectors:
        for i, value in enumerate(vector[:dimension]):
            total[i] += value
    return [value / len(vectors) for value in total]


def dominant_tag(weights: Dict[str, float]) -> Optional[str]:
    """Highest weighted tag; equal weights go to the lexicographically smallest tag."""
    if not weights:
        return None
    return min(weights.items(), key=lambda item: (-item[1], item[0]))[0]


class TagClusterer:
    """
    Assigns every file to exactly one cluster.

    Files start in the cluster of their dominant tag. When embeddings are
    available, a single refinement pass moves a file to another cluster whose
    centroid it is clearly closer to. Clusters below `min_cluster_size` are
    folded into the fallback cluster. The result depends only on the input, so
    a preview and a real run cluster identically.
    """

    def __init__(self, config: CognifsConfig):
        self.config = config

    @property
    def fallback(self) -> str:
        return self.config.fallback_cluster

    def cluster(self, file_tags: Iterable[FileTags]) -> List[Cluster]:
        """
        Cluster tagged files.

        Args:
            file_tags: Tags for each file

        Returns:
            Clusters sorted by tag, each with its paths sorted
        """
        files = sorted(file_tags, key=lambda t: str(t.path))
        assignment: Dict[Path, str] = {
            t.path: dominant_tag(t.weights) or self.fallback for t in files
        }

        embeddings = {t.path: t.embedding for t in files if t.embedding}
        if embeddings:
            self.refine(files, assignment, embeddings)

        members: Dict[str, List[Path]] = defaultdict(list)
        for path, tag in assignment.items():
            members[tag].append(path)

        clusters: Dict[str, List[Path]] = defaultdict(list)
        for tag, paths in members.items():
            if tag != self.fallback and len(paths) < self.config.min_cluster_size:
                logger.debug(f"Cluster '{tag}' has {len(paths)} files, merging into {self.fallback}")
                tag = self.fallback
            clusters[tag].extend(paths)

        result = [Cluster(tag=tag, paths=sorted(paths)) for tag, paths in sorted(clusters.items())]
        logger.info(f"Grouped {len(files)} files into {len(result)} clusters")
        return result

    def refine(
        self,
        files: List[FileTags],
        assignment: Dict[Path, str],
        embeddings: Dict[Path, List[float]],
    ) -> None:
        """
        Move files towards the most similar cluster centroid.

        Centroids are computed once before the pass, so the order in which files
        are visited cannot change the outcome. A file moves only when the other
        centroid beats its own by at least `embedding_margin` and is itself above
        `similarity_threshold`.
        """
        grouped: Dict[str, List[List[float]]] = defaultdict(list)
        for path, embedding in embeddings.items():
            grouped[assignment[path]].append(embedding)
        centroids = {tag: centroid(vectors) for tag, vectors in sorted(grouped.items())}
        if len(centroids) < 2:
            return

        for tags in files:
            embedding = embeddings.get(tags.path)
            if not embedding:
                continue
            current = assignment[tags.path]
            own = cosine_similarity(embedding, centroids[current]) if current in centroids else 0.0

            best_tag, best = current, own
            for tag, center in centroids.items():
                if tag == current:
                    continue
                similarity = cosine_similarity(embedding, center)
                if similarity > best:
                    best_tag, best = tag, similarity

            if (
                best_tag != current
                and best >= self.config.similarity_threshold
                and best - own >= self.config.embedding_margin
            ):
                logger.debug(f"Moving {tags.path} from '{current}' to '{best_tag}' ({best:.3f})")
                assignment[tags.path] = best_tag
