"""Tests for the filesystem scanner."""

import hashlib
import os
from pathlib import Path

import pytest

from cognifs.services.exceptions import RootUnreadable
from cognifs.sync.scanner import Scanner


@pytest.mark.asyncio
async def test_scan_directory_records_every_file(scanner: Scanner, root: Path, make_files):
    make_files(
        {
            "a.txt": "alpha",
            "notes/todo.txt": "todo: write tests",
            "notes/deep/nested.md": "# nested",
        }
    )

    result = await scanner.scan_directory(root)

    assert result.root == root
    assert set(result.records) == {
        root / "a.txt",
        root / "notes" / "todo.txt",
        root / "notes" / "deep" / "nested.md",
    }
    assert result.errors == {}
    assert {root, root / "notes", root / "notes" / "deep"} <= result.directories


@pytest.mark.asyncio
async def test_record_fields(scanner: Scanner, root: Path, make_files):
    make_files({"Report.PDF": "pdf bytes"})

    result = await scanner.scan_directory(root)
    record = result.records[root / "Report.PDF"]

    assert record.path.is_absolute()
    assert record.size == len("pdf bytes")
    assert record.extension == "pdf"
    assert record.content_hash == hashlib.sha256(b"pdf bytes").hexdigest()
    assert record.modified_at.tzinfo is not None


@pytest.mark.asyncio
async def test_ignored_names_are_not_recorded(scanner: Scanner, root: Path, make_files):
    make_files({".DS_Store": "junk", "keep.txt": "keep"})

    result = await scanner.scan_directory(root)

    assert set(result.records) == {root / "keep.txt"}


@pytest.mark.asyncio
async def test_missing_root_raises(scanner: Scanner, tmp_path: Path):
    with pytest.raises(RootUnreadable):
        await scanner.scan_directory(tmp_path / "missing")


@pytest.mark.asyncio
async def test_file_root_raises(scanner: Scanner, root: Path, make_files):
    files = make_files({"a.txt": "alpha"})
    with pytest.raises(RootUnreadable):
        await scanner.scan_directory(files["a.txt"])


@pytest.mark.asyncio
async def test_symlink_loop_is_not_followed(scanner: Scanner, root: Path, make_files):
    make_files({"sub/a.txt": "alpha"})
    os.symlink(root, root / "sub" / "loop")

    result = await scanner.scan_directory(root)

    assert set(result.records) == {root / "sub" / "a.txt"}


@pytest.mark.asyncio
async def test_symlink_outside_root_is_followed(scanner: Scanner, root: Path, tmp_path: Path, make_files):
    make_files({"a.txt": "alpha"})
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "b.txt").write_text("beta")
    os.symlink(outside, root / "linked")

    result = await scanner.scan_directory(root)

    assert set(result.records) == {root / "a.txt", root / "linked" / "b.txt"}


@pytest.mark.asyncio
async def test_symlink_into_root_is_not_followed(scanner: Scanner, root: Path, make_files):
    make_files({"real/a.txt": "alpha"})
    os.symlink(root / "real", root / "alias")

    result = await scanner.scan_directory(root)

    # each file is reached by exactly one path
    assert set(result.records) == {root / "real" / "a.txt"}


@pytest.mark.skipif(os.geteuid() == 0, reason="root can read anything")
@pytest.mark.asyncio
async def test_unreadable_directory_is_reported(scanner: Scanner, root: Path, make_files):
    make_files({"ok.txt": "ok", "locked/secret.txt": "secret"})
    locked = root / "locked"
    locked.chmod(0)
    try:
        result = await scanner.scan_directory(root)
    finally:
        locked.chmod(0o755)

    assert root / "ok.txt" in result.records
    assert locked in result.errors


def test_iter_records_is_lazy_and_restartable(scanner: Scanner, root: Path, make_files):
    make_files({"a.txt": "alpha", "b.txt": "beta"})

    records = scanner.iter_records(root)
    first = next(records)
    assert first.path == root / "a.txt"

    assert [r.name for r in scanner.iter_records(root)] == ["a.txt", "b.txt"]
