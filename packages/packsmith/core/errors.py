"""Exception hierarchy for packsmith builds.

Two failure classes exist:

- ``ConfigurationError`` is fatal. It is raised while a project is being
  constructed, before any artifact is written, and aborts the run.
- Everything else derived from ``ArtifactError`` is scoped to a single
  buildable/profile pair. ``Project.run`` reports it and moves on to the
  next artifact.
"""

from __future__ import annotations

from pathlib import Path


class PacksmithError(Exception):
    """Base exception for all packsmith errors."""

    pass


class ConfigurationError(PacksmithError):
    """Raised when the build configuration cannot form a valid build graph.

    Attributes:
        name: Offending package, bundle or profile name (if any).
        reason: What specifically went wrong.
    """

    def __init__(self, reason: str, *, name: str | None = None) -> None:
        self.name = name
        self.reason = reason
        message = f"'{name}': {reason}" if name else reason
        super().__init__(message)


class ArtifactError(PacksmithError):
    """Base for failures confined to one artifact."""

    pass


class MissingSourceError(ArtifactError):
    """Raised when a configured source file cannot be found.

    Attributes:
        path: Path that was looked up (without the extension fallback).
        buildable: Name of the package that lists the file.
    """

    def __init__(self, path: Path | str, *, buildable: str) -> None:
        self.path = Path(path)
        self.buildable = buildable
        super().__init__(f"Source file not found for '{buildable}': {self.path}")


class TemplateError(ArtifactError):
    """Raised when a source or header template fails to evaluate."""

    pass


class MinifyError(ArtifactError):
    """Raised when the minifier rejects its input."""

    pass


class ArtifactWriteError(ArtifactError):
    """Raised when an artifact cannot be written to disk.

    Attributes:
        path: Target path of the failed write.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Could not write {self.path}: {reason}")


__all__ = [
    "ArtifactError",
    "ArtifactWriteError",
    "ConfigurationError",
    "MinifyError",
    "MissingSourceError",
    "PacksmithError",
    "TemplateError",
]
