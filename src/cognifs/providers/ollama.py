"""Ollama-backed tag generation and embeddings."""

import re
from pathlib import Path
from typing import Any, Dict, List

import httpx
from httpx import AsyncClient, Timeout
from loguru import logger

from cognifs.providers.base import EmbeddingProvider, TagProvider
from cognifs.services.exceptions import ProviderTimeout, ProviderUnavailable
from cognifs.utils import clean_tags

TAG_PROMPT = """You label files for a personal file organizer.
Return 3 to 6 short lowercase topic tags for the file below, most important first,
as a comma separated list and nothing else.

File name: {name}
Content:
{content}
"""

# Characters of content sent to the model
PROMPT_CONTENT_LIMIT = 4000


def create_client(base_url: str, timeout: float) -> AsyncClient:
    """HTTP client for an Ollama server."""
    return AsyncClient(
        base_url=base_url,
        timeout=Timeout(connect=10.0, read=timeout, write=timeout, pool=timeout),
    )


async def post_json(client: AsyncClient, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    POST payload and decode the JSON answer, mapping transport failures.

    Raises:
        ProviderTimeout: The request timed out
        ProviderUnavailable: Connection failure, error status or bad JSON
    """
    try:
        response = await client.post(url, json=payload)
        response.raise_for_status()
        return response.json()
    except httpx.TimeoutException as e:
        raise ProviderTimeout(f"Ollama request to {url} timed out") from e
    except httpx.HTTPError as e:
        raise ProviderUnavailable(f"Ollama request to {url} failed: {e}") from e
    except ValueError as e:
        raise ProviderUnavailable(f"Ollama returned invalid JSON from {url}") from e


class OllamaTagProvider(TagProvider):
    """
    Asks a local LLM for topic tags.

    The model answers with an ordered list; the first tag gets weight 1.0 and
    each later one a little less, so rank order survives as weight order.
    """

    name = "ollama"

    def __init__(self, model: str, client: AsyncClient):
        self.model = model
        self.client = client

    @classmethod
    def from_settings(cls, url: str, model: str, timeout: float) -> "OllamaTagProvider":
        return cls(model=model, client=create_client(url, timeout))

    async def tag(self, path: Path, content: str) -> Dict[str, float]:
        prompt = TAG_PROMPT.format(name=path.name, content=content[:PROMPT_CONTENT_LIMIT])
        data = await post_json(
            self.client,
            "/api/generate",
            {"model": self.model, "prompt": prompt, "stream": False},
        )
        tags = self.parse_tags(data.get("response", ""))
        logger.debug(f"Ollama tags for {path.name}: {tags}")
        return {tag: 1.0 - rank * 0.1 for rank, tag in enumerate(tags)}

    @staticmethod
    def parse_tags(answer: str) -> List[str]:
        """Split a model answer into clean tags, at most ten."""
        parts = re.split(r"[,\n;]+", answer.lower())
        words = [re.sub(r"[^a-z0-9]+", "", part.strip().lstrip("-*0123456789. ")) for part in parts]
        return clean_tags(words)[:10]

    async def aclose(self) -> None:
        await self.client.aclose()


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embeddings from Ollama's `/api/embeddings` endpoint."""

    def __init__(self, model: str, dims: int, client: AsyncClient):
        self.model = model
        self.dims = dims
        self.client = client

    @classmethod
    def from_settings(
        cls, url: str, model: str, dims: int, timeout: float
    ) -> "OllamaEmbeddingProvider":
        return cls(model=model, dims=dims, client=create_client(url, timeout))

    @property
    def dimension(self) -> int:
        return self.dims

    async def embed(self, text: str) -> List[float]:
        data = await post_json(
            self.client, "/api/embeddings", {"model": self.model, "prompt": text}
        )
        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ProviderUnavailable("Ollama returned no embedding")
        if self.dims and len(embedding) != self.dims:
            raise ProviderUnavailable(
                f"Expected {self.dims} dimensions from {self.model}, got {len(embedding)}"
            )
        return [float(x) for x in embedding]

    async def aclose(self) -> None:
        await self.client.aclose()
