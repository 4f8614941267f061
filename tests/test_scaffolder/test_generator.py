"""Tests for the project scaffolder (loop_agent.scaffolder.generator).

Covers:
- Every scaffold file is created with project-specific content
- package.json is valid JSON with the expected fields
- Re-scaffolding replaces an existing directory, file or symlink instead of merging
- Dry run touches nothing
- Filesystem failures become failed StepResults
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from loop_agent.config import Config
from loop_agent.scaffolder import ProjectScaffolder, ScaffoldError
from loop_agent.scaffolder.generator import TEXT_FILES, _author_name

pytestmark = pytest.mark.unit

EXPECTED_FILES = ["package.json", "src/index.js", "README.md", ".gitignore", "LICENSE"]


class TestGenerate:
    @pytest.mark.asyncio
    async def test_creates_all_files(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        assert root == live_config.project_dir("agent-infra-agent-waf")
        for name in EXPECTED_FILES:
            assert (root / name).is_file(), f"missing {name}"

    @pytest.mark.asyncio
    async def test_written_next_to_install_root(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        assert root.parent == live_config.root_dir.parent

    @pytest.mark.asyncio
    async def test_manifest(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        manifest = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert manifest["name"] == "agent-infra-agent-waf"
        assert manifest["version"] == "1.0.0"
        assert manifest["description"] == "Web Application Firewall for AI Agents"
        assert manifest["type"] == "module"
        assert manifest["main"] == "src/index.js"
        assert manifest["scripts"] == {"start": "node src/index.js", "test": "node --test"}
        assert manifest["keywords"] == ["ai", "agent", "infrastructure", "agent-waf"]
        assert manifest["author"] == "Test Author <test@example.com>"
        assert manifest["license"] == "MIT"
        assert manifest["repository"] == {
            "type": "git",
            "url": "https://github.com/test-org/agent-infra-agent-waf.git",
        }

    @pytest.mark.asyncio
    async def test_entry_point(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        text = (root / "src" / "index.js").read_text(encoding="utf-8")
        assert " * agent-infra-agent-waf\n" in text
        assert " * Web Application Firewall for AI Agents\n" in text
        assert "console.log('agent-infra-agent-waf initialized');" in text

    @pytest.mark.asyncio
    async def test_readme(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        text = (root / "README.md").read_text(encoding="utf-8")
        assert text.startswith("# agent-infra-agent-waf\n\nWeb Application Firewall for AI Agents\n")
        assert "## Installation" in text
        assert "npm install" in text
        assert "## Usage" in text
        assert "MIT - Test Author" in text
        assert "test@example.com" not in text

    @pytest.mark.asyncio
    async def test_gitignore(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        assert (root / ".gitignore").read_text(encoding="utf-8") == "node_modules\n.env\n*.log\n"

    @pytest.mark.asyncio
    async def test_license(self, live_config: Config, planned_project):
        root = await ProjectScaffolder(live_config).generate(planned_project)
        year = datetime.now(timezone.utc).year
        assert (root / "LICENSE").read_text(encoding="utf-8") == (
            f"MIT License\n\nCopyright (c) {year} Test Author\n"
        )

    @pytest.mark.asyncio
    async def test_existing_directory_replaced(self, live_config: Config, planned_project):
        target = live_config.project_dir(planned_project.repo_name)
        (target / "stale").mkdir(parents=True)
        (target / "stale" / "old.txt").write_text("old")
        (target / "README.md").write_text("old readme")

        root = await ProjectScaffolder(live_config).generate(planned_project)

        assert not (root / "stale").exists()
        assert "old readme" not in (root / "README.md").read_text(encoding="utf-8")
        files = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
        assert files == sorted(EXPECTED_FILES)

    @pytest.mark.asyncio
    async def test_plain_file_at_target_replaced(self, live_config: Config, planned_project):
        target = live_config.project_dir(planned_project.repo_name)
        target.write_text("not a directory")

        root = await ProjectScaffolder(live_config).generate(planned_project)

        assert root.is_dir()
        assert (root / "package.json").exists()

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need extra privileges on Windows")
    async def test_symlink_at_target_unlinked_not_followed(
        self, live_config: Config, planned_project, tmp_path
    ):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        (elsewhere / "keep.txt").write_text("keep")
        target = live_config.project_dir(planned_project.repo_name)
        target.symlink_to(elsewhere, target_is_directory=True)

        root = await ProjectScaffolder(live_config).generate(planned_project)

        assert not root.is_symlink()
        assert (root / "package.json").exists()
        assert (elsewhere / "keep.txt").read_text() == "keep"
        assert not (elsewhere / "package.json").exists()

    @pytest.mark.asyncio
    async def test_filesystem_error_raises_scaffold_error(self, live_config: Config, planned_project):
        with patch(
            "loop_agent.scaffolder.generator._reset_directory",
            side_effect=PermissionError("permission denied"),
        ):
            with pytest.raises(ScaffoldError) as exc_info:
                await ProjectScaffolder(live_config).generate(planned_project)
        assert exc_info.value.project == "agent-infra-agent-waf"
        assert "permission denied" in str(exc_info.value)


class TestBuild:
    @pytest.mark.asyncio
    async def test_live_success(self, live_config: Config, planned_project):
        result = await ProjectScaffolder(live_config).build(planned_project)
        assert result.success is True
        assert result.repo == "agent-infra-agent-waf"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_dry_run_touches_nothing(self, live_config: Config, planned_project):
        before = sorted(live_config.projects_dir.iterdir())
        result = await ProjectScaffolder(live_config).build(planned_project, dry_run=True)
        assert result.success is True
        assert sorted(live_config.projects_dir.iterdir()) == before

    @pytest.mark.asyncio
    async def test_failure_reported_not_raised(self, live_config: Config, planned_project):
        # A regular file where the output parent directory should be.
        blocker = live_config.root_dir / "blocker"
        blocker.write_text("")
        config = live_config.model_copy(update={"output_dir": blocker})

        result = await ProjectScaffolder(config).build(planned_project)

        assert result.success is False
        assert result.repo == "agent-infra-agent-waf"
        assert result.error
        assert "agent-infra-agent-waf" in result.error


class TestHelpers:
    def test_text_files_cover_templates(self):
        outputs = [out for _, out in TEXT_FILES]
        assert outputs == ["src/index.js", "README.md", ".gitignore", "LICENSE"]

    @pytest.mark.parametrize(
        "author, expected",
        [
            ("Yoshi Kondo <yoshi@musicailab.com>", "Yoshi Kondo"),
            ("Plain Name", "Plain Name"),
            ("<only@email>", "<only@email>"),
        ],
    )
    def test_author_name(self, author: str, expected: str):
        assert _author_name(author) == expected
