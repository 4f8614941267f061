"""Loop Agent configuration.

Centralised, typed configuration shared by the runner, the terminal
dashboard and the status server. All settings use Pydantic v2 models so they
are validated at construction time and can be overridden from environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from loop_agent.projects import PROJECTS

_PACKAGE_DIR = Path(__file__).parent

DEFAULT_PORT = 3456
DEFAULT_GITHUB_ORG = "yksanjo"
DEFAULT_AUTHOR = "Yoshi Kondo <yoshi@musicailab.com>"


class Config(BaseModel):
    """Global Loop Agent configuration.

    ``root_dir`` is the installation root: the log file lives directly
    inside it and scaffolded projects are written one level above it unless
    ``output_dir`` says otherwise.
    """

    root_dir: Path = Field(default_factory=Path.cwd)
    output_dir: Optional[Path] = Field(
        default=None, description="Where projects are scaffolded; defaults to root_dir.parent"
    )
    log_filename: str = Field(default="logs.json")
    dashboard_file: Path = Field(default=_PACKAGE_DIR / "static" / "dashboard.html")

    github_org: str = Field(default=DEFAULT_GITHUB_ORG, min_length=1)
    author: str = Field(default=DEFAULT_AUTHOR)

    max_iterations: int = Field(default=len(PROJECTS), ge=1, le=len(PROJECTS))
    dry_run: bool = Field(default=True)
    command_timeout: Optional[int] = Field(
        default=None, ge=1, description="Per-command timeout in seconds (None waits forever)"
    )

    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="0 binds a free port")
    open_browser: bool = Field(default=True)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def log_file(self) -> Path:
        """Path to the JSON iteration log."""
        return self.root_dir / self.log_filename

    @property
    def projects_dir(self) -> Path:
        """Parent directory of every scaffolded project."""
        return self.output_dir if self.output_dir is not None else self.root_dir.parent

    def project_dir(self, repo_name: str) -> Path:
        """Target directory for a single scaffolded repository."""
        return self.projects_dir / repo_name

    # ------------------------------------------------------------------
    # Environment overrides
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            LOOP_ROOT_DIR, LOOP_OUTPUT_DIR, LOOP_GITHUB_ORG, LOOP_AUTHOR,
            LOOP_MAX_ITERATIONS, LOOP_COMMAND_TIMEOUT, LOOP_PORT (falls back
            to PORT).

        Keyword arguments win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LOOP_ROOT_DIR"):
            kwargs["root_dir"] = Path(os.environ["LOOP_ROOT_DIR"])
        if os.environ.get("LOOP_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["LOOP_OUTPUT_DIR"])
        if os.environ.get("LOOP_GITHUB_ORG"):
            kwargs["github_org"] = os.environ["LOOP_GITHUB_ORG"]
        if os.environ.get("LOOP_AUTHOR"):
            kwargs["author"] = os.environ["LOOP_AUTHOR"]
        if os.environ.get("LOOP_MAX_ITERATIONS"):
            kwargs["max_iterations"] = int(os.environ["LOOP_MAX_ITERATIONS"])
        if os.environ.get("LOOP_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["LOOP_COMMAND_TIMEOUT"])

        port = os.environ.get("LOOP_PORT") or os.environ.get("PORT")
        if port:
            kwargs["port"] = int(port)

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
