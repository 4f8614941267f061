"""Loop Agent runner: the Plan -> Build -> Push loop.

Walks the fixed project catalogue one project per iteration:

Plan  -- pick the next project and derive its repository name.
Build -- scaffold the project directory.
Push  -- ``git init/add/commit`` and ``gh repo create --push``.
Log   -- append an iteration record to ``logs.json``.
Report -- print cumulative statistics.

Failures never stop the loop; they are logged and the next project starts.
Ctrl+C is honoured between iterations only, so a running ``git``/``gh``
command always finishes.

Usage::

    python -m loop_agent.runner            # dry run
    python -m loop_agent.runner --live     # create and push real repositories
"""

from __future__ import annotations

import asyncio
import signal
import time
from dataclasses import dataclass, field
from typing import Optional

from rich.markup import escape

from loop_agent.config import Config
from loop_agent.log_store import IterationLog
from loop_agent.models import IterationRecord, PlannedProject, StepResult
from loop_agent.projects import PROJECTS, repo_name_for
from loop_agent.publisher import Publisher
from loop_agent.scaffolder import ProjectScaffolder
from loop_agent.utils import (
    console,
    format_duration,
    format_elapsed,
    print_banner,
    print_error,
    print_rule,
    print_success,
    print_summary_table,
    print_warning,
)


@dataclass
class RunState:
    """Mutable per-run counters, threaded through the loop."""

    current_index: int = 0
    created_count: int = 0
    started_at: float = field(default_factory=time.monotonic)
    records: list[IterationRecord] = field(default_factory=list)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class LoopRunner:
    """Sequential Plan -> Build -> Push loop over ``PROJECTS``."""

    def __init__(
        self,
        config: Config,
        scaffolder: ProjectScaffolder | None = None,
        publisher: Publisher | None = None,
        log: IterationLog | None = None,
    ) -> None:
        self.config = config
        self.scaffolder = scaffolder or ProjectScaffolder(config)
        self.publisher = publisher or Publisher(config)
        self.log = log or IterationLog(config.log_file)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def plan(self, state: RunState) -> Optional[PlannedProject]:
        """Pick the next project, or ``None`` once the catalogue is exhausted."""
        with console.status("[cyan]Planning project...[/cyan]"):
            if state.current_index >= len(PROJECTS):
                project = None
            else:
                descriptor = PROJECTS[state.current_index]
                repo_name = repo_name_for(descriptor)
                project = PlannedProject(
                    descriptor=descriptor,
                    repo_name=repo_name,
                    full_name=f"{self.config.github_org}/{repo_name}",
                )

        if project is None:
            print_warning("All projects completed!")
        else:
            console.print(f"[green]✓ Planned: {project.repo_name}[/green]")
        return project

    async def build(self, project: PlannedProject) -> StepResult:
        console.print("\n[cyan]🔨 Build Phase:[/cyan]")
        with console.status(f"[cyan]  Building {project.repo_name}...[/cyan]"):
            result = await self.scaffolder.build(project, dry_run=self.config.dry_run)
        self._report_step(result, f"Built {project.repo_name}")
        return result

    async def push(self, project: PlannedProject) -> StepResult:
        console.print("\n[cyan]🚀 Push Phase:[/cyan]")
        with console.status(f"[cyan]  Pushing {project.repo_name}...[/cyan]"):
            result = await self.publisher.push(project, dry_run=self.config.dry_run)
        self._report_step(result, f"Pushed to {project.url}")
        return result

    def _report_step(self, result: StepResult, done_message: str) -> None:
        if self.config.dry_run:
            print_warning(escape(f"  [DRY RUN] {result.repo}"))
        elif result.success:
            console.print(f"[green]  ✓ {escape(done_message)}[/green]")
        else:
            print_error(f"  ✗ Failed {result.repo}: {escape(result.error or '')}")

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run_iteration(self, state: RunState) -> Optional[IterationRecord]:
        """Run one full iteration; ``None`` means there was nothing left to plan."""
        iteration_start = time.monotonic()
        iteration = state.current_index + 1

        print_rule(f"ITERATION {iteration}/{self.config.max_iterations}")

        project = self.plan(state)
        if project is None:
            return None

        result = await self.build(project)
        if result.success:
            result = await self.push(project)
        else:
            print_warning(f"  Skipping push for {project.repo_name}: build failed")

        if result.success:
            state.created_count += 1
        state.current_index += 1

        duration_ms = int((time.monotonic() - iteration_start) * 1000)
        record = IterationRecord(
            iteration=iteration,
            project=project.repo_name,
            result=result,
            duration=duration_ms,
        )
        await self.log.append(record)
        state.records.append(record)
        console.print(
            f"[dim]Iteration {iteration} finished in {format_duration(duration_ms / 1000)}[/dim]"
        )
        return record

    async def run(self, stop: asyncio.Event | None = None) -> RunState:
        """Run iterations until the catalogue is exhausted or *stop* is set.

        *stop* is only checked before an iteration starts.
        """
        stop = stop or asyncio.Event()
        state = RunState()

        print_banner(
            "LOOP AGENT - AI INFRASTRUCTURE CREATOR",
            [
                f"[dim]Plan → Build → Push ({self.config.max_iterations} Projects)[/dim]",
                f"[dim]Target: github.com/{self.config.github_org}[/dim]",
            ],
        )
        if self.config.dry_run:
            print_warning("⚠️  DRY RUN MODE\n")

        while not stop.is_set() and state.current_index < self.config.max_iterations:
            record = await self.run_iteration(state)
            if record is None:
                break
            self.display_stats(state)

        self.display_stats(state)
        print_success("✓ Loop completed\n")
        return state

    def display_stats(self, state: RunState) -> None:
        print_summary_table(
            {
                "Total Iterations": f"{state.current_index}/{self.config.max_iterations}",
                "Projects Created": str(state.created_count),
                "Elapsed Time": format_elapsed(state.elapsed),
                "GitHub Org": self.config.github_org,
            },
            title="LOOP AGENT STATISTICS",
        )


# ---------------------------------------------------------------------------
# Interrupt handling
# ---------------------------------------------------------------------------


def install_interrupt_handler(stop: asyncio.Event) -> None:
    """Set *stop* on SIGINT instead of raising ``KeyboardInterrupt``."""

    def _on_interrupt(*_: object) -> None:
        if not stop.is_set():
            print_warning("\nStopping...")
        stop.set()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, _on_interrupt)
    except NotImplementedError:
        # Windows event loops have no add_signal_handler.
        signal.signal(signal.SIGINT, lambda *_: loop.call_soon_threadsafe(_on_interrupt))


async def _run(config: Config) -> RunState:
    stop = asyncio.Event()
    install_interrupt_handler(stop)
    return await LoopRunner(config).run(stop)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m loop_agent.runner``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Loop Agent -- Plan → Build → Push template repositories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m loop_agent.runner\n"
            "  python -m loop_agent.runner --live\n"
            "  python -m loop_agent.runner --live --org my-org\n"
        ),
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Create and push real repositories (default is a dry run)",
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Force a dry run, even with --live",
    )
    parser.add_argument(
        "--org",
        default=None,
        help="GitHub organisation or user to publish under",
    )

    args = parser.parse_args(argv)

    dry_run = args.dry_run or not args.live
    if not args.live and not args.dry_run:
        print_warning("Running in dry-run mode. Use --live to create actual repos.\n")

    config = Config.from_env(dry_run=dry_run, github_org=args.org)
    asyncio.run(_run(config))


if __name__ == "__main__":
    main()
