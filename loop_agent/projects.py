"""The fixed catalogue of template projects the loop scaffolds.

Order matters: the runner walks this list front to back and the terminal
dashboard matches log entries to projects by position.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ProjectDescriptor(BaseModel):
    """Static metadata for one template project."""

    model_config = ConfigDict(frozen=True)

    name: str
    language: str
    icon: str
    description: str


PROJECTS: tuple[ProjectDescriptor, ...] = (
    ProjectDescriptor(
        name="agent-waf",
        language="typescript",
        icon="🔒",
        description="Web Application Firewall for AI Agents",
    ),
    ProjectDescriptor(
        name="agent-observability",
        language="go",
        icon="📊",
        description="Observability platform for AI agent monitoring",
    ),
    ProjectDescriptor(
        name="agent-gateway",
        language="rust",
        icon="🌐",
        description="API Gateway for AI agent communication",
    ),
    ProjectDescriptor(
        name="agent-memory-store",
        language="python",
        icon="💾",
        description="Distributed memory store for AI agents",
    ),
    ProjectDescriptor(
        name="agent-orchestrator",
        language="typescript",
        icon="🎯",
        description="Orchestration engine for multi-agent workflows",
    ),
    ProjectDescriptor(
        name="agent-registry",
        language="go",
        icon="📋",
        description="Service registry and discovery for AI agents",
    ),
    ProjectDescriptor(
        name="agent-policy-engine",
        language="rust",
        icon="🛡️",
        description="Policy enforcement engine for AI governance",
    ),
    ProjectDescriptor(
        name="agent-cache",
        language="python",
        icon="⚡",
        description="Intelligent caching layer for AI responses",
    ),
    ProjectDescriptor(
        name="agent-queue",
        language="typescript",
        icon="📨",
        description="Message queue system for AI agents",
    ),
    ProjectDescriptor(
        name="agent-config",
        language="go",
        icon="⚙️",
        description="Configuration management for AI deployments",
    ),
)

REPO_PREFIX = "agent-infra-"


def repo_name_for(project: ProjectDescriptor) -> str:
    """Repository name used both locally and on GitHub."""
    return f"{REPO_PREFIX}{project.name}"
