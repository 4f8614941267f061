"""Pydantic v2 models for the loop's per-iteration data.

``IterationRecord`` is the on-disk shape of one ``logs.json`` entry; the
browser dashboard and the terminal dashboard both read it, so field names
are part of the external contract.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from loop_agent.projects import ProjectDescriptor


class PlannedProject(BaseModel):
    """A descriptor resolved against a GitHub organisation."""

    descriptor: ProjectDescriptor
    repo_name: str
    full_name: str = Field(..., description="'<org>/<repo_name>'")

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def description(self) -> str:
        return self.descriptor.description

    @property
    def url(self) -> str:
        return f"https://github.com/{self.full_name}"

    @property
    def clone_url(self) -> str:
        return f"{self.url}.git"


class StepResult(BaseModel):
    """Outcome of a build or push step."""

    success: bool
    repo: str
    url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, repo: str, url: str | None = None) -> "StepResult":
        return cls(success=True, repo=repo, url=url)

    @classmethod
    def failed(cls, repo: str, error: str) -> "StepResult":
        return cls(success=False, repo=repo, error=error)


class IterationRecord(BaseModel):
    """One persisted iteration outcome."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    iteration: int = Field(..., ge=1)
    project: str
    result: StepResult
    duration: int = Field(..., ge=0, description="Elapsed milliseconds")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialise for ``logs.json``; absent url/error keys are omitted."""
        data = self.model_dump(mode="json")
        data["result"] = self.result.model_dump(mode="json", exclude_none=True)
        return data
