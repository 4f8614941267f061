"""Scaffolds one template repository on disk.

Each project gets a fresh directory containing ``package.json``,
``src/index.js``, ``README.md``, ``.gitignore`` and ``LICENSE``.  An
existing directory at the target path is removed first, so re-running a
project always replaces its output instead of merging into it.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinja2 import TemplateError

from loop_agent.config import Config
from loop_agent.models import PlannedProject, StepResult

from .templates import TemplateRenderer


# (template, output path relative to the project root)
TEXT_FILES: list[tuple[str, str]] = [
    ("src/index.js.j2", "src/index.js"),
    ("README.md.j2", "README.md"),
    ("gitignore.j2", ".gitignore"),
    ("LICENSE.j2", "LICENSE"),
]

MANIFEST_NAME = "package.json"


class ScaffoldError(Exception):
    """Raised when a project directory cannot be written."""

    def __init__(self, message: str, project: str = ""):
        self.project = project
        super().__init__(message)


class ProjectScaffolder:
    """Writes the scaffold for a ``PlannedProject`` under ``config.projects_dir``."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def build(self, project: PlannedProject, dry_run: bool = False) -> StepResult:
        """Run the build step and report its outcome without raising.

        In dry-run mode nothing is touched and the step reports success.
        """
        if dry_run:
            return StepResult.ok(project.repo_name)

        try:
            await self.generate(project)
        except ScaffoldError as exc:
            return StepResult.failed(project.repo_name, str(exc))
        return StepResult.ok(project.repo_name)

    async def generate(self, project: PlannedProject) -> Path:
        """Generate the project directory and return its path.

        Raises:
            ScaffoldError: On any filesystem or template error.
        """
        project_root = self.config.project_dir(project.repo_name)
        context = self._build_context(project)

        try:
            await asyncio.to_thread(_reset_directory, project_root)
            await asyncio.to_thread(
                (project_root / MANIFEST_NAME).write_text,
                json.dumps(self._build_manifest(project), indent=2, ensure_ascii=False),
                "utf-8",
            )
            for template_name, output_name in TEXT_FILES:
                await self.renderer.render_to_file(
                    template_name, project_root / output_name, context
                )
        except (OSError, TemplateError) as exc:
            raise ScaffoldError(
                f"{project.repo_name}: {exc}", project=project.repo_name
            ) from exc

        return project_root

    # -- Context building --------------------------------------------------

    def _build_context(self, project: PlannedProject) -> dict[str, Any]:
        """Build the Jinja2 template context for a project."""
        return {
            "repo_name": project.repo_name,
            "full_name": project.full_name,
            "name": project.name,
            "language": project.descriptor.language,
            "description": project.description,
            "author": self.config.author,
            "author_name": _author_name(self.config.author),
            "year": datetime.now(timezone.utc).year,
        }

    def _build_manifest(self, project: PlannedProject) -> dict[str, Any]:
        """The ``package.json`` document for a project."""
        return {
            "name": project.repo_name,
            "version": "1.0.0",
            "description": project.description,
            "type": "module",
            "main": "src/index.js",
            "scripts": {
                "start": "node src/index.js",
                "test": "node --test",
            },
            "keywords": ["ai", "agent", "infrastructure", project.name],
            "author": self.config.author,
            "license": "MIT",
            "repository": {
                "type": "git",
                "url": project.clone_url,
            },
        }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _reset_directory(path: Path) -> None:
    """Remove *path* if present, then recreate it empty.

    A symlink or plain file at *path* is unlinked, never followed.
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def _author_name(author: str) -> str:
    """Strip a trailing ``<email>`` from an npm-style author string."""
    return author.split("<", 1)[0].strip() or author
