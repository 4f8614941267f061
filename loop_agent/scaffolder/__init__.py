"""Loop Agent scaffolder -- writes template repositories to disk.

Quick usage::

    from loop_agent.scaffolder import ProjectScaffolder

    scaffolder = ProjectScaffolder(config)
    result = await scaffolder.build(planned_project)
"""

from loop_agent.scaffolder.generator import ProjectScaffolder, ScaffoldError
from loop_agent.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectScaffolder",
    "ScaffoldError",
    "TemplateRenderer",
]
