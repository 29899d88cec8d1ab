"""Task generators live here.

Each module registers a family of related tasks on a `Runner` through a
`generator(runner, config, prefix=..., suffix=...)` function. `app` wires them
together for library and application packages.
"""

from .app import application, generate, library

__all__ = ["application", "generate", "library"]
