"""Rich renderings of move plans and execution reports."""

from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text
from rich.tree import Tree

from cognifs.models import ExecutionMode, ExecutionReport, MoveEntry, MovePlan, MoveStatus

STATUS_STYLES = {
    MoveStatus.PLANNED: "cyan",
    MoveStatus.CONFIRMED: "cyan",
    MoveStatus.MOVED: "green",
    MoveStatus.FAILED: "red",
    MoveStatus.SKIPPED: "dim",
}


def relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def plan_tree(plan: MovePlan, title: Optional[str] = None) -> Tree:
    """Moves grouped by destination folder, each file with its origin."""
    tree = Tree(title or f"[bold]{plan.root}[/bold]")

    by_dir: Dict[Path, List[MoveEntry]] = defaultdict(list)
    for entry in plan.entries:
        if entry.status != MoveStatus.SKIPPED:
            by_dir[entry.destination_path.parent].append(entry)

    if not by_dir:
        tree.add("No files to move")
        return tree

    for directory, entries in sorted(by_dir.items()):
        branch = tree.add(
            f"[bold blue]{relative(directory, plan.root)}/[/bold blue] "
            f"([yellow]{len(entries)} files[/yellow])"
        )
        for entry in entries:
            style = STATUS_STYLES[entry.status]
            label = Text.assemble(
                (entry.destination_path.name, style),
                (f" (from {relative(entry.source_path, plan.root)})", "dim"),
            )
            if entry.status == MoveStatus.FAILED:
                label.append(f" {entry.reason}", style="red")
            branch.add(label)
    return tree


def report_summary(report: ExecutionReport) -> Text:
    """One line of counts; sync counts are shown only when non-zero."""
    parts = []
    for label, count, style in [
        ("added", report.added, "green"),
        ("updated", report.updated, "yellow"),
        ("removed", report.removed, "red"),
        ("unchanged", report.unchanged, "dim"),
    ]:
        if count:
            parts.append((f"{count} {label}", style))

    moved_label = "would move" if report.mode == ExecutionMode.PREVIEW else "moved"
    moved_count = report.planned if report.mode == ExecutionMode.PREVIEW else report.moved
    parts.append((f"{moved_count} {moved_label}", "cyan"))
    if report.mode == ExecutionMode.APPLY and report.planned:
        parts.append((f"{report.planned} not moved", "yellow"))
    parts.append((f"{report.skipped} skipped", "dim"))
    parts.append((f"{report.failed} failed", "red" if report.failed else "dim"))

    text = Text()
    for i, (part, style) in enumerate(parts):
        if i:
            text.append(", ")
        text.append(part, style=style)
    return text


def report_panel(report: ExecutionReport, root: Optional[Path] = None, verbose: bool = False) -> Panel:
    """Counts plus every failure; skipped files are counted per reason, and listed when verbose."""
    renderables = [report_summary(report)]

    if report.failures:
        failures = Tree("[red]Failed[/red]")
        for item in report.failures:
            path = relative(item.path, root) if root else str(item.path)
            failures.add(Text.assemble((path, "red"), ": ", item.reason))
        renderables.append(failures)

    if report.skipped_items:
        skipped = Tree("[dim]Skipped[/dim]")
        by_reason: Dict[str, List[str]] = defaultdict(list)
        for item in report.skipped_items:
            by_reason[item.reason].append(relative(item.path, root) if root else str(item.path))
        for reason, paths in sorted(by_reason.items()):
            branch = skipped.add(f"[bold]{reason}[/bold] ({len(paths)})")
            if verbose:
                for path in sorted(paths):
                    branch.add(path)
        renderables.append(skipped)

    title = "Preview" if report.mode == ExecutionMode.PREVIEW else "Reorganization"
    return Panel(Group(*renderables), title=title, expand=False)


def display_plan(plan: MovePlan, console: Console) -> None:
    console.print(Panel(plan_tree(plan), title="Proposed changes", expand=False))
    console.print(
        f"Move {len(plan.planned)} files into {len(plan.destination_dirs)} folders"
    )


def display_report(
    report: ExecutionReport, console: Console, root: Optional[Path] = None, verbose: bool = False
) -> None:
    console.print(report_panel(report, root, verbose))
