"""Tests for the watch service."""

import json
from pathlib import Path

import pytest
from watchfiles import Change

from cognifs.sync.watch_service import WatchService, WatchServiceState


def test_state_keeps_recent_events():
    state = WatchServiceState()
    for i in range(150):
        state.add_event(path=f"file{i}.txt", action="new", status="success", checksum="abc")

    assert len(state.recent_events) == 100
    assert state.recent_events[0].path == "file149.txt"


def test_record_error():
    state = WatchServiceState()
    state.record_error("boom")

    assert state.error_count == 1
    assert state.last_error is not None
    assert state.recent_events[0].status == "error"
    assert state.recent_events[0].error == "boom"


def test_filter_changes(watch_service: WatchService, root: Path):
    assert watch_service.filter_changes(Change.added, str(root / "notes" / "a.txt"))
    assert not watch_service.filter_changes(Change.added, str(root / ".DS_Store"))
    assert not watch_service.filter_changes(Change.modified, str(root / "repo" / ".git" / "index"))


@pytest.mark.asyncio
async def test_handle_changes_records_events(watch_service: WatchService, root: Path, make_files):
    files = make_files({"a.txt": "alpha", "b.txt": "beta"})

    await watch_service.handle_changes(root)

    assert watch_service.state.synced_files == 2
    assert watch_service.state.last_scan is not None
    assert {e.action for e in watch_service.state.recent_events} == {"new"}

    files["a.txt"].write_text("changed")
    files["b.txt"].unlink()
    await watch_service.handle_changes(root)

    actions = [e.action for e in watch_service.state.recent_events[:2]]
    assert sorted(actions) == ["deleted", "modified"]


@pytest.mark.asyncio
async def test_status_file_written(watch_service: WatchService, root: Path, make_files):
    make_files({"a.txt": "alpha"})

    await watch_service.handle_changes(root)

    data = json.loads(watch_service.status_path.read_text())
    assert data["synced_files"] == 1
    assert data["recent_events"][0]["path"] == str(root / "a.txt")


@pytest.mark.asyncio
async def test_index_failure_keeps_watching(watch_service: WatchService, index, root: Path, make_files):
    make_files({"a.txt": "alpha"})
    index.offline = True

    report = await watch_service.handle_changes(root)

    assert report is None
    assert watch_service.state.error_count == 1
