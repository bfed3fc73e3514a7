"""Primary/fallback tag provider pair."""

import asyncio
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from cognifs.providers.base import TagProvider
from cognifs.services.exceptions import ProviderError, ProviderTimeout


class FallbackTagProvider(TagProvider):
    """
    Tries the primary provider first and falls back on any provider failure.

    Typical use is an LLM tagger backed by the dictionary tagger, so a missing
    or overloaded model degrades tag quality instead of failing the run.

    primary_timeout bounds the primary call on its own. It must be shorter than
    any deadline the caller puts around tag(), so a hanging primary still
    leaves time for the fallback.
    """

    def __init__(
        self,
        primary: TagProvider,
        fallback: TagProvider,
        primary_timeout: Optional[float] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.primary_timeout = primary_timeout
        self.name = f"{primary.name}+{fallback.name}"

    async def tag(self, path: Path, content: str) -> Dict[str, float]:
        try:
            tags = await self._primary_tag(path, content)
        except ProviderError as e:
            logger.warning(f"{self.primary.name} tagging failed for {path}, using {self.fallback.name}: {e}")
            return await self.fallback.tag(path, content)

        if not tags:
            logger.debug(f"{self.primary.name} returned no tags for {path}, using {self.fallback.name}")
            return await self.fallback.tag(path, content)
        return tags

    async def _primary_tag(self, path: Path, content: str) -> Dict[str, float]:
        if self.primary_timeout is None:
            return await self.primary.tag(path, content)
        try:
            return await asyncio.wait_for(self.primary.tag(path, content), self.primary_timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout(
                f"{self.primary.name} gave no answer within {self.primary_timeout}s"
            ) from e

    async def aclose(self) -> None:
        await self.primary.aclose()
        await self.fallback.aclose()
