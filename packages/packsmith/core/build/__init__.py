"""Build graph and artifact generation.

Core concepts:
- Package: artifact built from a list of source files
- Bundle: artifact built from other packages and bundles
- Project: registry of both, profile table and run driver
- WriteOutcome / BuildReport: per-artifact and per-run results

Example:
    >>> from packsmith.core.build import Project
    >>> project = Project.from_directory(".", force=True)
    >>> report = project.run()
    >>> report.success
    True
"""

from packsmith.core.build.buildable import Buildable, EffectiveSettings
from packsmith.core.build.bundle import Bundle
from packsmith.core.build.package import Package
from packsmith.core.build.project import Project, build
from packsmith.core.build.result import (
    BuildReport,
    OutcomeStatus,
    WriteOutcome,
    created_outcome,
    failed_outcome,
    skipped_outcome,
)

__all__ = [
    "BuildReport",
    "Buildable",
    "Bundle",
    "EffectiveSettings",
    "OutcomeStatus",
    "Package",
    "Project",
    "WriteOutcome",
    "build",
    "created_outcome",
    "failed_outcome",
    "skipped_outcome",
]
