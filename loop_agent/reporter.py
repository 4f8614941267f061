"""Terminal dashboard: a one-shot snapshot of loop progress.

Reads ``logs.json`` once, prints overall progress and the status of every
project, and exits.  Re-run it to refresh.

Log entries are matched to projects by position (entry ``i`` describes
project ``i``), which holds as long as the runner logs one entry per project
in catalogue order.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from loop_agent.config import Config
from loop_agent.log_store import entry_succeeded, read_log
from loop_agent.projects import PROJECTS
from loop_agent.utils import console

BAR_WIDTH = 20


class ProjectStatus(str, Enum):
    PENDING = "PENDING"
    DONE = "DONE"
    FAIL = "FAIL"


_STATUS_STYLE: dict[ProjectStatus, tuple[str, str]] = {
    ProjectStatus.PENDING: ("○", "grey50"),
    ProjectStatus.DONE: ("✓", "green"),
    ProjectStatus.FAIL: ("✗", "red"),
}


def completed_count(entries: list[Any]) -> int:
    """Number of finished iterations, capped at the catalogue size."""
    return min(len(entries), len(PROJECTS))


def progress_percent(completed: int) -> int:
    return round(completed / len(PROJECTS) * 100)


def progress_bar(percent: int, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar, one cell per 5%."""
    filled = min(max(round(percent / 5), 0), width)
    return "█" * filled + "░" * (width - filled)


def project_statuses(entries: list[Any]) -> list[ProjectStatus]:
    """Status of each catalogue project, looked up by log position."""
    statuses = []
    for index in range(len(PROJECTS)):
        if index >= len(entries):
            statuses.append(ProjectStatus.PENDING)
        elif entry_succeeded(entries[index]):
            statuses.append(ProjectStatus.DONE)
        else:
            statuses.append(ProjectStatus.FAIL)
    return statuses


def build_dashboard(entries: list[Any], github_org: str) -> Panel:
    """Build the dashboard renderable for the given log entries."""
    completed = completed_count(entries)
    percent = progress_percent(completed)

    progress = Text()
    progress.append("PROGRESS\n", style="bold white")
    progress.append(f"{progress_bar(percent)} {percent}%\n")
    progress.append(f"Completed: {completed}/{len(PROJECTS)}", style="dim")

    table = Table(title="PROJECTS", title_style="bold white", show_header=False, box=None)
    table.add_column("state", no_wrap=True)
    table.add_column("icon", no_wrap=True)
    table.add_column("project", min_width=25)
    table.add_column("status", no_wrap=True)

    for project, status in zip(PROJECTS, project_statuses(entries)):
        symbol, style = _STATUS_STYLE[status]
        table.add_row(
            Text(symbol, style=style),
            project.icon,
            project.name,
            Text(status.value, style=style),
        )

    return Panel(
        Group(progress, Text(""), table),
        title="[bold white]🚀 LOOP AGENT DASHBOARD[/bold white]",
        subtitle=f"[dim]Target: github.com/{github_org}[/dim]",
        border_style="cyan",
    )


def render(log_file: str | Path, github_org: str, out: Console | None = None) -> None:
    """Clear the screen and print the dashboard for *log_file*."""
    out = out or console
    out.clear()
    out.print()
    out.print(build_dashboard(read_log(log_file), github_org))
    out.print()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m loop_agent.reporter``."""
    import argparse

    parser = argparse.ArgumentParser(description="Loop Agent terminal dashboard")
    parser.add_argument(
        "--log",
        default=None,
        help="Path to logs.json (default: <root>/logs.json)",
    )
    args = parser.parse_args(argv)

    config = Config.from_env()
    render(args.log or config.log_file, config.github_org)


if __name__ == "__main__":
    main()
