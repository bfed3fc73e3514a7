"""Tests for the JSON file index."""

from pathlib import Path

import pytest

from cognifs.models import IndexedDocument
from cognifs.providers.json_index import JsonIndexClient
from cognifs.services.exceptions import IndexConnectionError, RejectedDocument


@pytest.fixture
def json_index(tmp_path: Path) -> JsonIndexClient:
    return JsonIndexClient(tmp_path / "index" / "index.json")


def doc(path: str, tags=(), content_hash: str = "h") -> IndexedDocument:
    return IndexedDocument(path=Path(path), tags=set(tags), content_hash=content_hash)


@pytest.mark.asyncio
async def test_empty_snapshot_without_file(json_index: JsonIndexClient):
    assert await json_index.snapshot() == []


@pytest.mark.asyncio
async def test_upsert_and_snapshot(json_index: JsonIndexClient):
    await json_index.upsert([doc("/data/a.pdf", ["invoices"]), doc("/data/b.txt")])
    await json_index.upsert([doc("/data/a.pdf", ["receipts"], content_hash="h2")])

    documents = {d.path: d for d in await json_index.snapshot()}

    assert set(documents) == {Path("/data/a.pdf"), Path("/data/b.txt")}
    assert documents[Path("/data/a.pdf")].tags == {"receipts"}
    assert documents[Path("/data/a.pdf")].content_hash == "h2"


@pytest.mark.asyncio
async def test_persists_across_clients(json_index: JsonIndexClient):
    await json_index.upsert([doc("/data/a.pdf", ["invoices"], content_hash="abc")])

    reopened = JsonIndexClient(json_index.index_file)
    [document] = await reopened.snapshot()

    assert document.path == Path("/data/a.pdf")
    assert document.tags == {"invoices"}
    assert document.content_hash == "abc"


@pytest.mark.asyncio
async def test_delete_ignores_unknown_paths(json_index: JsonIndexClient):
    await json_index.upsert([doc("/data/a.pdf"), doc("/data/b.txt")])

    await json_index.delete([Path("/data/a.pdf"), Path("/data/missing.txt")])

    assert [d.path for d in await json_index.snapshot()] == [Path("/data/b.txt")]


@pytest.mark.asyncio
async def test_relative_paths_are_rejected(json_index: JsonIndexClient):
    with pytest.raises(RejectedDocument) as exc:
        await json_index.upsert([doc("relative/a.txt"), doc("/data/b.txt")])

    assert exc.value.paths == [Path("relative/a.txt")]
    assert await json_index.snapshot() == []


@pytest.mark.asyncio
async def test_corrupt_file_is_a_connection_error(json_index: JsonIndexClient):
    json_index.index_file.parent.mkdir(parents=True)
    json_index.index_file.write_text("{not json")

    with pytest.raises(IndexConnectionError):
        await json_index.snapshot()


@pytest.mark.asyncio
async def test_search_ranks_tags_over_names(json_index: JsonIndexClient):
    await json_index.upsert(
        [
            doc("/data/invoice_list.txt", ["notes"]),
            doc("/data/scan.pdf", ["invoice"]),
            doc("/data/photo.jpg", ["image"]),
        ]
    )

    results = await json_index.search("invoice")

    assert [d.path.name for d in results] == ["scan.pdf", "invoice_list.txt"]
    assert await json_index.search("") == []
    assert len(await json_index.search("invoice", limit=1)) == 1
