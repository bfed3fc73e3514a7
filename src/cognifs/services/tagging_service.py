"""Service deriving tags and embeddings for scanned files."""

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger

from cognifs.config import CognifsConfig
from cognifs.constants import TEXT_EXTENSIONS
from cognifs.models import FileRecord, FileTags
from cognifs.providers.base import EmbeddingProvider, TagProvider
from cognifs.providers.dictionary import path_tags
from cognifs.services.exceptions import ProviderError, ProviderTimeout


def read_content(path: Path, extension: str, max_bytes: int) -> str:
    """Read the head of a text-like file; other files have no content."""
    if extension not in TEXT_EXTENSIONS:
        return ""
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes)
    except OSError as e:
        logger.debug(f"Cannot read content of {path}: {e}")
        return ""
    return data.decode("utf-8", errors="replace")


class TaggingService:
    """
    Runs the tag and embedding providers over a batch of files.

    At most `provider_concurrency` files are in flight and every provider call
    is bounded by `provider_timeout`. A tagging failure degrades the file to
    tags derived from its path and extension; an embedding failure just leaves
    the file without an embedding. The batch itself never fails.
    """

    def __init__(
        self,
        tag_provider: TagProvider,
        embedding_provider: EmbeddingProvider,
        config: CognifsConfig,
    ):
        self.tag_provider = tag_provider
        self.embedding_provider = embedding_provider
        self.config = config

    async def tag_files(self, records: Iterable[FileRecord]) -> Dict[Path, FileTags]:
        """
        Tag every record.

        Args:
            records: Files to tag

        Returns:
            Mapping of path to FileTags, one per record
        """
        records = list(records)
        semaphore = asyncio.Semaphore(self.config.provider_concurrency)

        async def bounded(record: FileRecord) -> FileTags:
            async with semaphore:
                return await self.tag_file(record)

        results = await asyncio.gather(*(bounded(record) for record in records))
        tagged = {result.path: result for result in results}

        degraded = sum(1 for result in results if result.degraded)
        logger.info(f"Tagged {len(tagged)} files ({degraded} degraded)")
        return tagged

    async def tag_file(self, record: FileRecord) -> FileTags:
        """Tag and embed a single file."""
        content = await asyncio.to_thread(
            read_content, record.path, record.extension, self.config.max_content_bytes
        )

        try:
            weights = await self._call(self.tag_provider.tag(record.path, content))
            result = FileTags(path=record.path, weights=weights or path_tags(record.path))
        except ProviderError as e:
            logger.warning(f"Tagging {record.path} degraded to path tags: {e}")
            result = FileTags(
                path=record.path, weights=path_tags(record.path), degraded=True, error=str(e)
            )

        result.embedding = await self._embed(record.path, content)
        logger.debug(f"Tags for {record.path}: {sorted(result.weights)}")
        return result

    async def _embed(self, path: Path, content: str) -> Optional[List[float]]:
        if not self.embedding_provider.dimension:
            return None
        try:
            embedding = await self._call(self.embedding_provider.embed(content or path.stem))
        except ProviderError as e:
            logger.warning(f"No embedding for {path}: {e}")
            return None
        return embedding or None

    async def _call(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.config.provider_timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout(
                f"Provider did not answer within {self.config.provider_timeout}s"
            ) from e
