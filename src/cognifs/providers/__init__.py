"""Provider implementations and the factories that pick them from config."""

from cognifs.config import CognifsConfig
from cognifs.providers.base import (
    EmbeddingProvider,
    IndexClient,
    NullEmbeddingProvider,
    TagProvider,
)
from cognifs.providers.dictionary import DictionaryTagProvider
from cognifs.providers.fallback import FallbackTagProvider
from cognifs.providers.json_index import JsonIndexClient
from cognifs.providers.meilisearch import MeilisearchIndexClient
from cognifs.providers.ollama import OllamaEmbeddingProvider, OllamaTagProvider

# share of provider_timeout the LLM tagger gets, the rest is left for the fallback
LLM_TIMEOUT_SHARE = 0.75


def create_tag_provider(config: CognifsConfig) -> TagProvider:
    """Dictionary tagging, or an LLM tagger that falls back to it."""
    dictionary = DictionaryTagProvider()
    if config.tag_provider == "ollama":
        llm_timeout = config.provider_timeout * LLM_TIMEOUT_SHARE
        llm = OllamaTagProvider.from_settings(
            url=config.ollama_url,
            model=config.ollama_tag_model,
            timeout=llm_timeout,
        )
        return FallbackTagProvider(primary=llm, fallback=dictionary, primary_timeout=llm_timeout)
    return dictionary


def create_embedding_provider(config: CognifsConfig) -> EmbeddingProvider:
    if config.embedding_provider == "ollama":
        return OllamaEmbeddingProvider.from_settings(
            url=config.ollama_url,
            model=config.ollama_model,
            dims=config.ollama_dims,
            timeout=config.provider_timeout,
        )
    return NullEmbeddingProvider()


def create_index_client(config: CognifsConfig) -> IndexClient:
    if config.index_backend == "meilisearch":
        return MeilisearchIndexClient.from_settings(
            url=config.meilisearch_url,
            index_name=config.meilisearch_index_name,
            api_key=config.meilisearch_api_key,
            timeout=config.provider_timeout,
        )
    return JsonIndexClient(config.index_file)


__all__ = [
    "TagProvider",
    "EmbeddingProvider",
    "IndexClient",
    "NullEmbeddingProvider",
    "DictionaryTagProvider",
    "FallbackTagProvider",
    "OllamaTagProvider",
    "OllamaEmbeddingProvider",
    "JsonIndexClient",
    "MeilisearchIndexClient",
    "create_tag_provider",
    "create_embedding_provider",
    "create_index_client",
]
