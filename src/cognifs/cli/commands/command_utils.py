"""utility functions for commands"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from rich.console import Console

from cognifs.config import CognifsConfig
from cognifs.organizer import FolderNameGenerator, SafeMover, TagClusterer
from cognifs.providers import (
    EmbeddingProvider,
    IndexClient,
    TagProvider,
    create_embedding_provider,
    create_index_client,
    create_tag_provider,
)
from cognifs.services.organize_service import OrganizeService
from cognifs.services.tagging_service import TaggingService
from cognifs.sync import ProtectedZoneDetector, Scanner, SyncService

console = Console()


@dataclass
class Services:
    """Everything a command needs, wired from one config."""

    config: CognifsConfig
    tag_provider: TagProvider
    embedding_provider: EmbeddingProvider
    index: IndexClient
    sync_service: SyncService
    organize_service: OrganizeService


def build_services(
    config: CognifsConfig,
    tag_provider: TagProvider,
    embedding_provider: EmbeddingProvider,
    index: IndexClient,
) -> Services:
    scanner = Scanner(config)
    detector = ProtectedZoneDetector(config)
    tagging = TaggingService(tag_provider, embedding_provider, config)
    sync_service = SyncService(scanner, detector, tagging, index, config)
    organize_service = OrganizeService(
        scanner=scanner,
        detector=detector,
        tagging=tagging,
        clusterer=TagClusterer(config),
        namer=FolderNameGenerator(config),
        mover=SafeMover(config),
        sync_service=sync_service,
        config=config,
    )
    return Services(
        config=config,
        tag_provider=tag_provider,
        embedding_provider=embedding_provider,
        index=index,
        sync_service=sync_service,
        organize_service=organize_service,
    )


@asynccontextmanager
async def get_services(config: CognifsConfig) -> AsyncIterator[Services]:
    """Create the configured providers and close them when done."""
    tag_provider = create_tag_provider(config)
    embedding_provider = create_embedding_provider(config)
    index = create_index_client(config)
    try:
        yield build_services(config, tag_provider, embedding_provider, index)
    finally:
        await tag_provider.aclose()
        await embedding_provider.aclose()
        await index.aclose()
