"""Tests for plan and report rendering."""

import io
from pathlib import Path

from rich.console import Console

from cognifs.models import (
    ExecutionMode,
    ExecutionReport,
    MoveEntry,
    MovePlan,
    MoveStatus,
    ReportItem,
)
from cognifs.organizer.preview import display_plan, display_report, report_summary


def render(fn, *args, **kwargs) -> str:
    output = io.StringIO()
    console = Console(file=output, width=120, color_system=None)
    fn(*args, console=console, **kwargs)
    return output.getvalue()


def sample_plan(root: Path) -> MovePlan:
    return MovePlan(
        root=root,
        entries=[
            MoveEntry(source_path=root / "a.pdf", destination_path=root / "invoices" / "a.pdf"),
            MoveEntry(source_path=root / "x" / "a.pdf", destination_path=root / "invoices" / "a_1.pdf"),
            MoveEntry(
                source_path=root / "repo" / "main.py",
                destination_path=root / "repo" / "main.py",
                status=MoveStatus.SKIPPED,
                reason="protected",
            ),
        ],
    )


def test_display_plan_groups_by_folder():
    output = render(display_plan, sample_plan(Path("/data")))

    assert "invoices/" in output
    assert "a_1.pdf (from x/a.pdf)" in output
    assert "main.py" not in output
    assert "Move 2 files into 1 folders" in output


def test_display_empty_plan():
    output = render(display_plan, MovePlan(root=Path("/data")))

    assert "No files to move" in output


def test_preview_summary():
    report = ExecutionReport.from_plan(sample_plan(Path("/data")), ExecutionMode.PREVIEW)

    assert report_summary(report).plain == "2 would move, 1 skipped, 0 failed"


def test_apply_summary_with_sync_counts():
    report = ExecutionReport(mode=ExecutionMode.APPLY, moved=3, added=1, removed=2, failed=1)

    assert report_summary(report).plain == "1 added, 2 removed, 3 moved, 0 skipped, 1 failed"


def test_report_lists_failures_and_counts_skips():
    report = ExecutionReport(
        mode=ExecutionMode.APPLY,
        failed=1,
        skipped=1,
        failures=[ReportItem(path=Path("/data/b.pdf"), reason="destination exists")],
        skipped_items=[ReportItem(path=Path("/data/repo/main.py"), reason="protected")],
    )

    compact = render(display_report, report, root=Path("/data"))
    verbose = render(display_report, report, root=Path("/data"), verbose=True)

    assert "b.pdf: destination exists" in compact
    assert "protected (1)" in compact
    assert "repo/main.py" not in compact
    assert "repo/main.py" in verbose
