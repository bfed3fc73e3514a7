"""Tests for the Meilisearch index client."""

import json
from pathlib import Path
from typing import List

import httpx
import pytest

from cognifs.models import IndexedDocument
from cognifs.providers.meilisearch import MeilisearchIndexClient, document_id
from cognifs.services.exceptions import IndexConnectionError, RejectedDocument


def make_client(handler, requests: List[httpx.Request]) -> MeilisearchIndexClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url="http://meili", transport=httpx.MockTransport(record))
    return MeilisearchIndexClient(index_name="files", client=client)


def test_document_id_is_stable_and_safe():
    first = document_id(Path("/data/My File (1).pdf"))

    assert first == document_id(Path("/data/My File (1).pdf"))
    assert first != document_id(Path("/data/My File (2).pdf"))
    assert first.isalnum()


@pytest.mark.asyncio
async def test_upsert_sends_documents():
    requests: List[httpx.Request] = []
    client = make_client(lambda r: httpx.Response(202, json={"taskUid": 1}), requests)

    await client.upsert([IndexedDocument(path=Path("/data/a.pdf"), tags={"invoices"})])

    [request] = requests
    assert request.method == "POST"
    assert request.url.path == "/indexes/files/documents"
    assert request.url.params["primaryKey"] == "id"
    [payload] = json.loads(request.content)
    assert payload["id"] == document_id(Path("/data/a.pdf"))
    assert payload["path"] == "/data/a.pdf"
    assert payload["tags"] == ["invoices"]


@pytest.mark.asyncio
async def test_upsert_rejected():
    client = make_client(lambda r: httpx.Response(400, json={"message": "bad"}), [])

    with pytest.raises(RejectedDocument) as exc:
        await client.upsert([IndexedDocument(path=Path("/data/a.pdf"))])

    assert exc.value.paths == [Path("/data/a.pdf")]


@pytest.mark.asyncio
async def test_server_error_is_connection_error():
    client = make_client(lambda r: httpx.Response(503, text="down"), [])

    with pytest.raises(IndexConnectionError):
        await client.upsert([IndexedDocument(path=Path("/data/a.pdf"))])


@pytest.mark.asyncio
async def test_transport_error_is_connection_error():
    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = make_client(fail, [])

    with pytest.raises(IndexConnectionError):
        await client.snapshot()


@pytest.mark.asyncio
async def test_snapshot_pages_through_documents():
    docs = [{"id": str(i), "path": f"/data/{i}.txt", "tags": ["t"]} for i in range(3)]

    def handler(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        page = docs[offset : offset + 2]
        return httpx.Response(200, json={"results": page, "offset": offset, "total": len(docs)})

    requests: List[httpx.Request] = []
    client = make_client(handler, requests)
    client_docs = await client.snapshot()

    assert [d.path for d in client_docs] == [Path(f"/data/{i}.txt") for i in range(3)]
    assert [int(r.url.params["offset"]) for r in requests] == [0, 2]


@pytest.mark.asyncio
async def test_snapshot_of_missing_index_is_empty():
    client = make_client(lambda r: httpx.Response(404, json={"code": "index_not_found"}), [])
    assert await client.snapshot() == []


@pytest.mark.asyncio
async def test_snapshot_skips_malformed_documents():
    body = {"results": [{"id": "1", "path": "/data/a.txt"}, {"id": "2", "size": "x"}], "total": 2}
    client = make_client(lambda r: httpx.Response(200, json=body), [])

    assert [d.path for d in await client.snapshot()] == [Path("/data/a.txt")]


@pytest.mark.asyncio
async def test_delete_by_ids():
    requests: List[httpx.Request] = []
    client = make_client(lambda r: httpx.Response(202, json={"taskUid": 2}), requests)

    await client.delete([Path("/data/a.pdf")])

    [request] = requests
    assert request.url.path == "/indexes/files/documents/delete-batch"
    assert json.loads(request.content) == [document_id(Path("/data/a.pdf"))]


@pytest.mark.asyncio
async def test_search_returns_hits():
    hits = {"hits": [{"id": "1", "path": "/data/scan.pdf", "tags": ["invoices"]}]}
    requests: List[httpx.Request] = []
    client = make_client(lambda r: httpx.Response(200, json=hits), requests)

    results = await client.search("invoice", limit=5)

    assert [d.path for d in results] == [Path("/data/scan.pdf")]
    assert json.loads(requests[0].content) == {"q": "invoice", "limit": 5}
