"""Result types for artifact generation.

Provides immutable outcome types; errors are captured in the outcome
instead of escaping ``Project.run``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class OutcomeStatus(str, Enum):
    """What happened to one buildable/profile artifact."""

    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class WriteOutcome(BaseModel):
    """Result of materializing one buildable for one profile.

    Attributes:
        buildable: Package or bundle name
        profile: Build profile name
        status: created, skipped or failed
        path: Artifact path (None when the profile is disabled)
        size_bytes: Bytes written (created only)
        source_map_path: Sibling map file, if one was written
        error: Error message (failed only)
        reason: Why the artifact was skipped

    Example:
        >>> outcome = created_outcome("core", "min", path, size_bytes=1024)
        >>> outcome.status
        <OutcomeStatus.CREATED: 'created'>
    """

    buildable: str = Field(description="Package or bundle name")
    profile: str = Field(description="Build profile name")
    status: OutcomeStatus
    path: Path | None = Field(default=None, description="Artifact path")
    size_bytes: int | None = Field(default=None, description="Bytes written")
    source_map_path: Path | None = Field(default=None, description="Source map path")
    error: str | None = Field(default=None, description="Error message (if failure)")
    reason: str | None = Field(default=None, description="Skip reason")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


# Helper functions to create outcomes


def created_outcome(
    buildable: str,
    profile: str,
    path: Path,
    size_bytes: int,
    source_map_path: Path | None = None,
) -> WriteOutcome:
    """Create an outcome for a freshly written artifact."""
    return WriteOutcome(
        buildable=buildable,
        profile=profile,
        status=OutcomeStatus.CREATED,
        path=path,
        size_bytes=size_bytes,
        source_map_path=source_map_path,
    )


def skipped_outcome(
    buildable: str,
    profile: str,
    path: Path | None,
    reason: str = "Up to date",
) -> WriteOutcome:
    """Create an outcome for an artifact that was left untouched."""
    return WriteOutcome(
        buildable=buildable,
        profile=profile,
        status=OutcomeStatus.SKIPPED,
        path=path,
        reason=reason,
    )


def failed_outcome(
    buildable: str,
    profile: str,
    path: Path | None,
    error: str,
) -> WriteOutcome:
    """Create an outcome for an artifact that could not be produced."""
    return WriteOutcome(
        buildable=buildable,
        profile=profile,
        status=OutcomeStatus.FAILED,
        path=path,
        error=error,
    )


class BuildReport(BaseModel):
    """Result of a complete project run.

    Attributes:
        outcomes: One outcome per buildable/profile pair, in build order
        total_duration_ms: Wall time of the run
        forced: Whether timestamps were ignored
    """

    outcomes: list[WriteOutcome] = Field(default_factory=list)
    total_duration_ms: float = Field(default=0.0, description="Total run duration (ms)")
    forced: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def success(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def created(self) -> list[WriteOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.CREATED]

    @property
    def skipped(self) -> list[WriteOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.SKIPPED]

    @property
    def failures(self) -> list[WriteOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

    def get(self, buildable: str, profile: str) -> WriteOutcome:
        """Get the outcome for one artifact.

        Raises:
            KeyError: If the pair was not part of the run
        """
        for outcome in self.outcomes:
            if outcome.buildable == buildable and outcome.profile == profile:
                return outcome
        raise KeyError(f"No outcome for '{buildable}' / '{profile}'")
