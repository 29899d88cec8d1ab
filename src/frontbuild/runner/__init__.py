"""In-repo task runner for the front-end build.

Provides the task registry with serial/parallel composites, file watching,
file-system helpers and a Typer CLI.
"""

from .core import Composite, Runner, TaskSpec  # re-export for convenience

__all__ = ["Composite", "Runner", "TaskSpec"]
