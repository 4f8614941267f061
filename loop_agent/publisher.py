"""Publishes a scaffolded project to GitHub.

Runs ``git init``, ``git add``, ``git commit`` and ``gh repo create`` in the
project directory, one after another.  The first command that fails stops
the sequence; its stderr (or exit code) becomes the step's error message.
Both ``git`` and ``gh`` must be on PATH and ``gh`` already authenticated.
"""

from __future__ import annotations

from pathlib import Path

from loop_agent.config import Config
from loop_agent.models import PlannedProject, StepResult
from loop_agent.utils import run_command


class PublishError(Exception):
    """Raised when a publish command fails or cannot be started."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


def publish_commands(project: PlannedProject, project_dir: Path) -> list[str]:
    """Shell commands that publish *project*, in execution order."""
    return [
        "git init",
        "git add .",
        f'git commit -m "Initial commit: {project.description}"',
        f"gh repo create {project.full_name} --public --source={project_dir} --push",
    ]


async def exec_command(cmd: str, cwd: Path, timeout: int | None = None) -> str:
    """Run one shell command in *cwd*, returning stdout.

    Raises:
        PublishError: On a non-zero exit or a spawn failure.
    """
    try:
        returncode, stdout, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    except OSError as exc:
        raise PublishError(str(exc), command=cmd) from exc

    if returncode != 0:
        raise PublishError(stderr or f"Exit code: {returncode}", command=cmd, stderr=stderr)
    return stdout


class Publisher:
    """Push step of the loop."""

    def __init__(self, config: Config) -> None:
        self.config = config

    async def push(self, project: PlannedProject, dry_run: bool = False) -> StepResult:
        """Publish *project* and report the outcome without raising.

        In dry-run mode no command is run and the step reports success.
        """
        if dry_run:
            return StepResult.ok(project.repo_name)

        project_dir = self.config.project_dir(project.repo_name)
        try:
            for cmd in publish_commands(project, project_dir):
                await exec_command(cmd, project_dir, timeout=self.config.command_timeout)
        except PublishError as exc:
            return StepResult.failed(project.repo_name, str(exc))

        return StepResult.ok(project.repo_name, url=project.url)
