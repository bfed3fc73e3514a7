"""Search index stored as a single local JSON file."""

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from cognifs.file_utils import FileWriteError, ensure_directory, write_file_atomic
from cognifs.models import IndexedDocument
from cognifs.providers.base import IndexClient
from cognifs.services.exceptions import IndexConnectionError, RejectedDocument

INDEX_FORMAT_VERSION = 1


class IndexFile(BaseModel):
    version: int = INDEX_FORMAT_VERSION
    documents: List[IndexedDocument] = Field(default_factory=list)


class JsonIndexClient(IndexClient):
    """
    Keeps every document in one JSON file, rewritten atomically on change.

    Suitable for personal trees of a few hundred thousand files; search is a
    plain term match over file names and tags.
    """

    def __init__(self, index_file: Path):
        self.index_file = index_file
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[Path, IndexedDocument]:
        if not self.index_file.exists():
            return {}
        try:
            data = IndexFile.model_validate_json(self.index_file.read_text(encoding="utf-8"))
        except OSError as e:
            raise IndexConnectionError(f"Cannot read index {self.index_file}: {e}") from e
        except ValidationError as e:
            raise IndexConnectionError(f"Index file {self.index_file} is corrupt: {e}") from e
        return {doc.path: doc for doc in data.documents}

    def _save(self, documents: Dict[Path, IndexedDocument]) -> None:
        data = IndexFile(documents=sorted(documents.values(), key=lambda d: str(d.path)))
        try:
            ensure_directory(self.index_file.parent)
            write_file_atomic(self.index_file, data.model_dump_json(indent=2))
        except FileWriteError as e:
            raise IndexConnectionError(str(e)) from e

    async def upsert(self, documents: Iterable[IndexedDocument]) -> None:
        documents = list(documents)
        rejected = [doc.path for doc in documents if not doc.path.is_absolute()]
        if rejected:
            raise RejectedDocument(f"{len(rejected)} documents have relative paths", rejected)

        async with self._lock:
            current = await asyncio.to_thread(self._load)
            for doc in documents:
                current[doc.path] = doc
            await asyncio.to_thread(self._save, current)
        logger.debug(f"Upserted {len(documents)} documents into {self.index_file}")

    async def delete(self, paths: Iterable[Path]) -> None:
        paths = set(paths)
        if not paths:
            return
        async with self._lock:
            current = await asyncio.to_thread(self._load)
            remaining = {p: d for p, d in current.items() if p not in paths}
            await asyncio.to_thread(self._save, remaining)
        logger.debug(f"Deleted {len(current) - len(remaining)} documents from {self.index_file}")

    async def snapshot(self) -> List[IndexedDocument]:
        async with self._lock:
            current = await asyncio.to_thread(self._load)
        return list(current.values())

    async def search(self, query: str, limit: int = 20) -> List[IndexedDocument]:
        terms = [t for t in query.lower().split() if t]
        if not terms:
            return []

        scored = []
        for doc in await self.snapshot():
            tags = {t.lower() for t in doc.tags}
            name = doc.path.name.lower()
            score = sum(2 for t in terms if t in tags) + sum(1 for t in terms if t in name)
            if score:
                scored.append((-score, str(doc.path), doc))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [doc for _, _, doc in scored[:limit]]
