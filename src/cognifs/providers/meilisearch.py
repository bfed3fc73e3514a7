"""Meilisearch index client over its HTTP API."""

import hashlib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import httpx
from httpx import AsyncClient, Timeout
from loguru import logger
from pydantic import ValidationError

from cognifs.models import IndexedDocument
from cognifs.providers.base import IndexClient
from cognifs.services.exceptions import IndexConnectionError, RejectedDocument

PAGE_SIZE = 1000


def document_id(path: Path) -> str:
    """Meilisearch ids only allow [a-zA-Z0-9_-], so paths are hashed."""
    return hashlib.sha256(str(path).encode()).hexdigest()[:32]


class MeilisearchIndexClient(IndexClient):
    """
    Stores IndexedDocuments in a Meilisearch index keyed by a hash of the path.

    Writes are enqueued as Meilisearch tasks and not awaited; the next snapshot
    reflects them once the server has processed the queue.
    """

    def __init__(self, index_name: str, client: AsyncClient):
        self.index_name = index_name
        self.client = client

    @classmethod
    def from_settings(
        cls, url: str, index_name: str, api_key: Optional[str] = None, timeout: float = 30.0
    ) -> "MeilisearchIndexClient":
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        client = AsyncClient(
            base_url=url,
            headers=headers,
            timeout=Timeout(connect=10.0, read=timeout, write=timeout, pool=timeout),
        )
        return cls(index_name=index_name, client=client)

    @property
    def _base(self) -> str:
        return f"/indexes/{self.index_name}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise IndexConnectionError(f"Meilisearch request {method} {url} failed: {e}") from e

    @staticmethod
    def _check(response: httpx.Response) -> None:
        if response.status_code >= 500:
            raise IndexConnectionError(
                f"Meilisearch error {response.status_code}: {response.text}"
            )

    async def upsert(self, documents: Iterable[IndexedDocument]) -> None:
        documents = list(documents)
        if not documents:
            return
        payload = [{"id": document_id(doc.path), **doc.model_dump(mode="json")} for doc in documents]
        response = await self._request(
            "POST", f"{self._base}/documents", params={"primaryKey": "id"}, json=payload
        )
        self._check(response)
        if response.status_code >= 400:
            raise RejectedDocument(
                f"Meilisearch rejected documents: {response.text}", [d.path for d in documents]
            )
        logger.debug(f"Enqueued {len(documents)} documents for {self.index_name}")

    async def delete(self, paths: Iterable[Path]) -> None:
        ids = [document_id(path) for path in paths]
        if not ids:
            return
        response = await self._request("POST", f"{self._base}/documents/delete-batch", json=ids)
        self._check(response)
        if response.status_code >= 400 and response.status_code != 404:
            raise IndexConnectionError(f"Meilisearch delete failed: {response.text}")

    async def snapshot(self) -> List[IndexedDocument]:
        documents: List[IndexedDocument] = []
        offset = 0
        while True:
            response = await self._request(
                "GET", f"{self._base}/documents", params={"limit": PAGE_SIZE, "offset": offset}
            )
            if response.status_code == 404:
                # index not created yet
                return documents
            self._check(response)
            if response.status_code >= 400:
                raise IndexConnectionError(f"Meilisearch snapshot failed: {response.text}")

            data = response.json()
            results = data.get("results", [])
            documents.extend(doc for doc in map(self._parse, results) if doc is not None)
            offset += len(results)
            if not results or offset >= data.get("total", 0):
                return documents

    async def search(self, query: str, limit: int = 20) -> List[IndexedDocument]:
        response = await self._request(
            "POST", f"{self._base}/search", json={"q": query, "limit": limit}
        )
        if response.status_code == 404:
            return []
        self._check(response)
        if response.status_code >= 400:
            raise IndexConnectionError(f"Meilisearch search failed: {response.text}")
        hits = response.json().get("hits", [])
        return [doc for doc in map(self._parse, hits) if doc is not None]

    @staticmethod
    def _parse(hit: Dict[str, Any]) -> Optional[IndexedDocument]:
        try:
            return IndexedDocument.model_validate(hit)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed index document {hit.get('id')}: {e}")
            return None

    async def aclose(self) -> None:
        await self.client.aclose()
