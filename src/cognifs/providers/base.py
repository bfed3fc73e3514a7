"""Interfaces for the external collaborators cognifs consumes.

Each interface is deliberately narrow: the core asks for tags, an embedding, or
a set of documents, and handles the documented failure kinds. Implementations
are picked from configuration by the factories in `cognifs.providers`.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List

from cognifs.models import IndexedDocument


class TagProvider(ABC):
    """Derives weighted tags for a file."""

    name: str = "tagger"

    @abstractmethod
    async def tag(self, path: Path, content: str) -> Dict[str, float]:
        """
        Return tag -> weight for one file.

        Weights are opaque comparable scores; higher means more representative.

        Raises:
            ProviderUnavailable: The provider cannot serve the request
            ProviderTimeout: The provider did not answer in time
        """

    async def aclose(self) -> None:
        """Release any held connections."""


class EmbeddingProvider(ABC):
    """Computes a fixed-length semantic vector for text."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the vectors this provider returns, 0 when disabled."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Compute an embedding.

        Raises:
            ProviderUnavailable: The provider cannot serve the request
            ProviderTimeout: The provider did not answer in time
        """

    async def aclose(self) -> None:
        """Release any held connections."""


class NullEmbeddingProvider(EmbeddingProvider):
    """Disables embeddings; clustering then relies on tags alone."""

    @property
    def dimension(self) -> int:
        return 0

    async def embed(self, text: str) -> List[float]:
        return []


class IndexClient(ABC):
    """Persists IndexedDocuments and answers queries over them."""

    @abstractmethod
    async def upsert(self, documents: Iterable[IndexedDocument]) -> None:
        """
        Insert or replace documents keyed by path.

        Raises:
            IndexConnectionError: The index cannot be reached
            RejectedDocument: The index refused some documents
        """

    @abstractmethod
    async def delete(self, paths: Iterable[Path]) -> None:
        """
        Remove documents by path. Unknown paths are ignored.

        Raises:
            IndexConnectionError: The index cannot be reached
        """

    @abstractmethod
    async def snapshot(self) -> List[IndexedDocument]:
        """
        Return every indexed document.

        Raises:
            IndexConnectionError: The index cannot be reached
        """

    @abstractmethod
    async def search(self, query: str, limit: int = 20) -> List[IndexedDocument]:
        """
        Return documents matching query, best first.

        Raises:
            IndexConnectionError: The index cannot be reached
        """

    async def aclose(self) -> None:
        """Release any held connections."""
