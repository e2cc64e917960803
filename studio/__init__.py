"""MediaStudio package entry.

Provides a stable module entrypoint (python -m studio) while the engine keeps
its top-level packages (app/, core/, infra/, services/, storage/).
"""

from studio.version import __version__  # single source of truth

__all__ = ["__version__"]
