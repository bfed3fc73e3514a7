"""Tests for OrganizeService."""

from pathlib import Path

import pytest

from cognifs.models import ExecutionMode, MoveStatus
from cognifs.services.exceptions import ConfirmationRequired, RootUnreadable
from cognifs.services.organize_service import OrganizeService

TREE = {
    "project/.git/config": "[core]",
    "project/README.md": "my project",
    "notes/todo.txt": "todo: call the bank",
    "inbox/todo_list.txt": "todo: buy milk",
    "invoice_march.pdf": "march",
    "scans/invoice_april.pdf": "april",
}


def snapshot_tree(root: Path):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())


@pytest.mark.asyncio
async def test_plan_skips_protected_and_clusters_the_rest(
    organize_service: OrganizeService, root: Path, make_files
):
    make_files(TREE)

    plan = await organize_service.plan(root)
    entries = {e.source_path.relative_to(root).as_posix(): e for e in plan.entries}

    assert len(entries) == len(TREE)
    assert entries["project/.git/config"].reason == "protected"
    assert entries["project/README.md"].reason == "protected"
    assert entries["notes/todo.txt"].destination_path == root / "task" / "todo.txt"
    assert entries["inbox/todo_list.txt"].destination_path == root / "task" / "todo_list.txt"
    assert entries["invoice_march.pdf"].destination_path == root / "invoices" / "invoice_march.pdf"


@pytest.mark.asyncio
async def test_preview_does_not_touch_the_tree(
    organize_service: OrganizeService, root: Path, make_files, index
):
    make_files(TREE)
    before = snapshot_tree(root)

    plan, report = await organize_service.organize(root, ExecutionMode.PREVIEW)

    assert snapshot_tree(root) == before
    assert report.planned == len(plan.planned) == 4
    assert report.skipped == 2
    assert index.upserts == []


@pytest.mark.asyncio
async def test_apply_requires_confirmation(
    organize_service: OrganizeService, root: Path, make_files
):
    make_files(TREE)
    before = snapshot_tree(root)

    with pytest.raises(ConfirmationRequired):
        await organize_service.organize(root, ExecutionMode.APPLY)

    assert snapshot_tree(root) == before


@pytest.mark.asyncio
async def test_apply_moves_and_reindexes(
    organize_service: OrganizeService, root: Path, make_files, index
):
    make_files(TREE)

    plan, report = await organize_service.organize(root, ExecutionMode.APPLY, confirmed=True)

    assert report.moved == 4
    assert report.failed == 0
    assert snapshot_tree(root) == [
        "invoices/invoice_april.pdf",
        "invoices/invoice_march.pdf",
        "project/.git/config",
        "project/README.md",
        "task/todo.txt",
        "task/todo_list.txt",
    ]
    # index holds the new locations, plus the protected files where they are
    assert set(index.documents) == {
        root / "project" / ".git" / "config",
        root / "project" / "README.md",
        root / "invoices" / "invoice_april.pdf",
        root / "invoices" / "invoice_march.pdf",
        root / "task" / "todo.txt",
        root / "task" / "todo_list.txt",
    }
    assert report.added == 6


@pytest.mark.asyncio
async def test_second_run_is_a_no_op(organize_service: OrganizeService, root: Path, make_files):
    make_files(TREE)
    await organize_service.organize(root, ExecutionMode.APPLY, confirmed=True)

    plan, report = await organize_service.organize(root, ExecutionMode.APPLY, confirmed=True)

    assert report.moved == 0
    assert {e.reason for e in plan.entries} == {"protected", "no-op"}


@pytest.mark.asyncio
async def test_unreachable_index_does_not_undo_moves(
    organize_service: OrganizeService, root: Path, make_files, index
):
    make_files(TREE)
    index.offline = True

    plan, report = await organize_service.organize(root, ExecutionMode.APPLY, confirmed=True)

    assert report.moved == 4
    assert report.added == 0
    assert (root / "task" / "todo.txt").exists()


@pytest.mark.asyncio
async def test_stale_plan_records_vanished_source(
    organize_service: OrganizeService, root: Path, make_files
):
    files = make_files(TREE)
    plan = await organize_service.plan(root)
    files["notes/todo.txt"].unlink()

    report = await organize_service.execute(plan, ExecutionMode.APPLY, confirmed=True)

    assert report.moved == 3
    assert [(i.path, i.reason) for i in report.failures] == [
        (files["notes/todo.txt"], "source vanished")
    ]
    assert plan.by_status(MoveStatus.FAILED)[0].source_path == files["notes/todo.txt"]


@pytest.mark.asyncio
async def test_missing_root(organize_service: OrganizeService, root: Path):
    with pytest.raises(RootUnreadable):
        await organize_service.plan(root / "missing")


@pytest.mark.asyncio
async def test_files_behind_outside_link_stay_put(
    organize_service: OrganizeService, root: Path, tmp_path: Path, make_files
):
    make_files(TREE)
    outside = tmp_path / "outside_tree"
    outside.mkdir()
    (outside / "invoice_march.txt").write_text("invoice march")
    (outside / "invoice_april.txt").write_text("invoice april")
    (root / "shared").symlink_to(outside, target_is_directory=True)

    plan, report = await organize_service.organize(root, ExecutionMode.APPLY, confirmed=True)
    entries = {e.source_path.relative_to(root).as_posix(): e for e in plan.entries}

    assert sorted(p.name for p in outside.iterdir()) == ["invoice_april.txt", "invoice_march.txt"]
    assert entries["shared/invoice_march.txt"].reason == "outside-root"
    assert entries["shared/invoice_april.txt"].reason == "outside-root"
    assert report.moved == 4
    assert report.failed == 0
