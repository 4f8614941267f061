"""Shared pytest fixtures for the Loop Agent test suite.

Provides reusable fixtures for:
- A temporary installation root with a sibling output directory
- Dry-run and live ``Config`` instances pointing at it
- Planned projects
- Sample ``logs.json`` content
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from loop_agent.config import Config
from loop_agent.models import PlannedProject
from loop_agent.projects import PROJECTS, repo_name_for


# ---------------------------------------------------------------------------
# Paths & Config
# ---------------------------------------------------------------------------

@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """Temporary installation root; projects land in its parent."""
    root = tmp_path / "loop-agent"
    root.mkdir()
    return root


@pytest.fixture
def dry_config(root_dir: Path) -> Config:
    return Config(root_dir=root_dir, dry_run=True, open_browser=False)


@pytest.fixture
def live_config(root_dir: Path) -> Config:
    return Config(
        root_dir=root_dir,
        dry_run=False,
        github_org="test-org",
        author="Test Author <test@example.com>",
        open_browser=False,
    )


def make_planned(index: int = 0, org: str = "test-org") -> PlannedProject:
    descriptor = PROJECTS[index]
    repo_name = repo_name_for(descriptor)
    return PlannedProject(
        descriptor=descriptor,
        repo_name=repo_name,
        full_name=f"{org}/{repo_name}",
    )


@pytest.fixture
def planned_project() -> PlannedProject:
    """The first catalogue project, planned under ``test-org``."""
    return make_planned(0)


# ---------------------------------------------------------------------------
# Log content
# ---------------------------------------------------------------------------

def make_log_entry(iteration: int, success: bool = True) -> dict[str, Any]:
    repo = repo_name_for(PROJECTS[(iteration - 1) % len(PROJECTS)])
    result: dict[str, Any] = {"success": success, "repo": repo}
    if success:
        result["url"] = f"https://github.com/test-org/{repo}"
    else:
        result["error"] = "fatal: something went wrong"
    return {
        "timestamp": "2026-01-01T00:00:00+00:00",
        "iteration": iteration,
        "project": repo,
        "result": result,
        "duration": 1200,
    }


@pytest.fixture
def sample_log_entries() -> list[dict[str, Any]]:
    """Three entries: done, failed, done."""
    return [make_log_entry(1), make_log_entry(2, success=False), make_log_entry(3)]


@pytest.fixture
def write_log(dry_config: Config):
    """Write raw text or JSON-serialisable data to the configured log file."""

    def _write(content: Any) -> Path:
        path = dry_config.log_file
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_shell", AsyncMock(return_value=proc)):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def planned_factory():
    """Factory: ``planned_factory(index, org)`` -> ``PlannedProject``."""
    return make_planned


@pytest.fixture
def log_entry_factory():
    """Factory: ``log_entry_factory(iteration, success)`` -> raw log dict."""
    return make_log_entry
