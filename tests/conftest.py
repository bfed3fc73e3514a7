"""Common test fixtures."""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

import pytest

from cognifs.config import CognifsConfig
from cognifs.models import IndexedDocument
from cognifs.organizer import FolderNameGenerator, SafeMover, TagClusterer
from cognifs.providers.base import (
    EmbeddingProvider,
    IndexClient,
    NullEmbeddingProvider,
    TagProvider,
)
from cognifs.providers.dictionary import DictionaryTagProvider
from cognifs.services.exceptions import IndexConnectionError, ProviderUnavailable, RejectedDocument
from cognifs.services.organize_service import OrganizeService
from cognifs.services.tagging_service import TaggingService
from cognifs.sync.protection import ProtectedZoneDetector
from cognifs.sync.scanner import Scanner
from cognifs.sync.sync_service import SyncService
from cognifs.sync.watch_service import WatchService


class StaticTagProvider(TagProvider):
    """Returns fixed tags per file name and fails for selected names."""

    name = "static"

    def __init__(
        self,
        tags: Optional[Dict[str, Dict[str, float]]] = None,
        failing: Iterable[str] = (),
        error: Exception = ProviderUnavailable("tagger offline"),
    ):
        self.tags = tags or {}
        self.failing = set(failing)
        self.error = error
        self.calls: List[Path] = []
        self.closed = False

    async def tag(self, path: Path, content: str) -> Dict[str, float]:
        self.calls.append(path)
        if path.name in self.failing:
            raise self.error
        return dict(self.tags.get(path.name, {}))

    async def aclose(self) -> None:
        self.closed = True


class StaticEmbeddingProvider(EmbeddingProvider):
    """Returns fixed vectors per text; unknown text fails."""

    def __init__(self, vectors: Dict[str, List[float]], dims: int = 3):
        self.vectors = vectors
        self.dims = dims

    @property
    def dimension(self) -> int:
        return self.dims

    async def embed(self, text: str) -> List[float]:
        if text not in self.vectors:
            raise ProviderUnavailable(f"no vector for {text}")
        return self.vectors[text]


class MemoryIndexClient(IndexClient):
    """Index kept in a dict, with switches for the failure kinds."""

    def __init__(self):
        self.documents: Dict[Path, IndexedDocument] = {}
        self.offline = False
        self.reject: Set[Path] = set()
        self.upserts: List[List[Path]] = []
        self.deletes: List[List[Path]] = []
        self.closed = False

    def _check(self):
        if self.offline:
            raise IndexConnectionError("index offline")

    async def upsert(self, documents: Iterable[IndexedDocument]) -> None:
        self._check()
        documents = list(documents)
        rejected = [doc.path for doc in documents if doc.path in self.reject]
        if rejected:
            raise RejectedDocument("rejected", rejected)
        self.upserts.append([doc.path for doc in documents])
        for doc in documents:
            self.documents[doc.path] = doc

    async def delete(self, paths: Iterable[Path]) -> None:
        self._check()
        paths = list(paths)
        self.deletes.append(paths)
        for path in paths:
            self.documents.pop(path, None)

    async def snapshot(self) -> List[IndexedDocument]:
        self._check()
        return list(self.documents.values())

    async def search(self, query: str, limit: int = 20) -> List[IndexedDocument]:
        self._check()
        hits = [doc for doc in self.documents.values() if query in doc.tags]
        return sorted(hits, key=lambda d: str(d.path))[:limit]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    # Patch HOME environment variable for the duration of the test
    monkeypatch.setenv("HOME", str(tmp_path))
    home = tmp_path / "cognifs-home"
    monkeypatch.setenv("COGNIFS_HOME", str(home))
    return home


@pytest.fixture
def test_config(config_home) -> CognifsConfig:
    """Test configuration with a private home and short timeouts."""
    return CognifsConfig(home=config_home, provider_timeout=2.0, sync_delay=10)


@pytest.fixture
def root(tmp_path) -> Path:
    """Directory tree under test, kept apart from the config home."""
    path = tmp_path / "files"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def make_files(root) -> Callable[..., Dict[str, Path]]:
    """Create files under root from a {relative path: content} mapping."""

    def _make(files: Dict[str, str]) -> Dict[str, Path]:
        created = {}
        for name, content in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            created[name] = path
        return created

    return _make


@pytest.fixture
def scanner(test_config) -> Scanner:
    return Scanner(test_config)


@pytest.fixture
def detector(test_config) -> ProtectedZoneDetector:
    return ProtectedZoneDetector(test_config)


@pytest.fixture
def tag_provider() -> TagProvider:
    return DictionaryTagProvider()


@pytest.fixture
def embedding_provider() -> EmbeddingProvider:
    return NullEmbeddingProvider()


@pytest.fixture
def index() -> MemoryIndexClient:
    return MemoryIndexClient()


@pytest.fixture
def tagging_service(tag_provider, embedding_provider, test_config) -> TaggingService:
    return TaggingService(tag_provider, embedding_provider, test_config)


@pytest.fixture
def sync_service(scanner, detector, tagging_service, index, test_config) -> SyncService:
    return SyncService(scanner, detector, tagging_service, index, test_config)


@pytest.fixture
def organize_service(
    scanner, detector, tagging_service, sync_service, test_config
) -> OrganizeService:
    return OrganizeService(
        scanner=scanner,
        detector=detector,
        tagging=tagging_service,
        clusterer=TagClusterer(test_config),
        namer=FolderNameGenerator(test_config),
        mover=SafeMover(test_config),
        sync_service=sync_service,
        config=test_config,
    )


@pytest.fixture
def watch_service(sync_service, test_config, root) -> WatchService:
    return WatchService(sync_service=sync_service, config=test_config, root=root)


@pytest.fixture
def static_tags() -> Callable[..., StaticTagProvider]:
    return StaticTagProvider


@pytest.fixture
def static_embeddings() -> Callable[..., StaticEmbeddingProvider]:
    return StaticEmbeddingProvider
