"""Render a finished audit as lines, rich tables or Markdown."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ngaudit.models import ClassificationEntry, RunState

NPM_PACKAGE_URL = "https://www.npmjs.com/package/{name}"

UPGRADE_TITLE = "Dependencies that are maintained but may need upgrading"
REMOVAL_TITLE = "Dependencies to review for removal or replacement"
UNKNOWN_TITLE = "Dependencies without @angular/core or not visible in the npm registry"


def summary_lines(state: RunState) -> list[str]:
    return [
        f"Total dependencies checked: {state.total}",
        f"May need upgrading: {len(state.may_need_upgrade)}",
        f"Review for removal: {len(state.review_for_removal)}",
        f"Unknown: {len(state.unknown)}",
    ]


# ── line ────────────────────────────────────────────────────────


def _print_entries(
    console: Console, entries: list[ClassificationEntry], style: str
) -> None:
    for entry in entries:
        console.print(f"- [{style}]{entry.name}[/]", highlight=False)
        console.print(
            f"  (current: [yellow]{entry.declared_range}[/], "
            f"latest: [blue]{entry.latest_version}[/])",
            highlight=False,
        )


def render_line(state: RunState, console: Console) -> None:
    console.print(f"\n[bold green]{UPGRADE_TITLE}:[/]")
    _print_entries(console, state.may_need_upgrade, "green")

    console.print(f"\n[bold red]{REMOVAL_TITLE}:[/]")
    _print_entries(console, state.review_for_removal, "red")

    console.print(f"\n[bold yellow]{UNKNOWN_TITLE}:[/]")
    for name in state.unknown:
        console.print(f"- [yellow]{name}[/]", highlight=False)

    console.print("\n[bold]Summary:[/]")
    for line in summary_lines(state):
        console.print(f"  {line}", highlight=False)


# ── table ───────────────────────────────────────────────────────


def _entry_table(title: str, entries: list[ClassificationEntry], style: str) -> Table:
    table = Table(title=title)
    table.add_column("Package", style=f"bold {style}")
    table.add_column("Current", style="yellow")
    table.add_column("Latest", style="blue")
    for entry in entries:
        table.add_row(entry.name, entry.declared_range, entry.latest_version)
    return table


def render_table(state: RunState, console: Console) -> None:
    console.print(_entry_table(UPGRADE_TITLE, state.may_need_upgrade, "green"))
    console.print(_entry_table(REMOVAL_TITLE, state.review_for_removal, "red"))

    unknown = Table(title=UNKNOWN_TITLE)
    unknown.add_column("Package", style="yellow")
    for name in state.unknown:
        unknown.add_row(name)
    console.print(unknown)

    summary = Table(title="Summary", show_header=False)
    summary.add_column("Metric", style="bold")
    summary.add_column("Count", justify="right")
    summary.add_row("Total checked", str(state.total))
    summary.add_row("[green]May need upgrading[/]", str(len(state.may_need_upgrade)))
    summary.add_row("[red]Review for removal[/]", str(len(state.review_for_removal)))
    summary.add_row("[yellow]Unknown[/]", str(len(state.unknown)))
    console.print(summary)


# ── markdown ────────────────────────────────────────────────────


def _markdown_table(entries: list[ClassificationEntry]) -> list[str]:
    if not entries:
        return ["_None_"]
    rows = ["| Package | Current | Latest |", "| --- | --- | --- |"]
    for entry in entries:
        rows.append(
            f"| {entry.name} | {entry.declared_range} | {entry.latest_version} |"
        )
    return rows


def to_markdown(state: RunState) -> str:
    lines = ["# Angular dependency audit", ""]

    lines += [f"## {UPGRADE_TITLE}", ""]
    lines += _markdown_table(state.may_need_upgrade)

    lines += ["", f"## {REMOVAL_TITLE}", ""]
    lines += _markdown_table(state.review_for_removal)

    lines += ["", f"## {UNKNOWN_TITLE}", ""]
    if state.unknown:
        lines += [
            f"- [{name}]({NPM_PACKAGE_URL.format(name=name)})"
            for name in state.unknown
        ]
    else:
        lines.append("_None_")

    lines += ["", "## Summary", ""]
    lines += [f"- {line}" for line in summary_lines(state)]
    return "\n".join(lines) + "\n"


def render_markdown(state: RunState, console: Console) -> None:
    console.print(
        to_markdown(state), markup=False, highlight=False, emoji=False, soft_wrap=True, end=""
    )


Renderer = Callable[[RunState, Console], None]

RENDERERS: dict[str, Renderer] = {
    "line": render_line,
    "table": render_table,
    "markdown": render_markdown,
}


def write_report(
    state: RunState,
    style: str = "line",
    output: Path | None = None,
    console: Console | None = None,
) -> None:
    """Render the report to the console, or to *output* without colour."""
    try:
        renderer = RENDERERS[style]
    except KeyError:
        raise ValueError(f"Unknown report style: {style}") from None

    if output is None:
        renderer(state, console or Console())
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as fh:
        renderer(state, Console(file=fh, no_color=True, width=120))
