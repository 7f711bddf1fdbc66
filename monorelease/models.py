"""Data models for monorelease.

These Pydantic models represent the records passed between the steps of the
changeset writer and the release publisher. None of them outlive a single
invocation; git, GitHub and the changeset directory are the system of record.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

BumpType = Literal["major", "minor", "patch"]


class AffectedPackage(BaseModel):
    """A workspace package touched by the current change.

    Attributes:
        name: Package name as published (e.g. "@repo/ui").
        version: Current version, when the detector reports one.
        path: Package directory relative to the repo root.
    """

    name: str
    version: str | None = None
    path: str | None = None


class ChangeRecord(BaseModel):
    """An intended version bump for one or more packages.

    Rendered into a changeset markdown file: YAML-style frontmatter mapping
    each package to its bump type, then the optional pull request reference
    and the description.

    Attributes:
        releases: Package name → bump type, in insertion order.
        reference: Rendered pull request reference line ("" when absent).
        summary: Free-text description of the change.
    """

    releases: dict[str, BumpType]
    reference: str = ""
    summary: str

    @field_validator("releases")
    @classmethod
    def _not_empty(cls, value: dict[str, BumpType]) -> dict[str, BumpType]:
        if not value:
            raise ValueError("a change record needs at least one package")
        return value

    def render(self) -> str:
        frontmatter = "\n".join(f'"{name}": {bump}' for name, bump in self.releases.items())
        reference = f"{self.reference}\n\n" if self.reference else ""
        return f"---\n{frontmatter}\n---\n\n{reference}{self.summary}\n"


class ChangesetOutcome(str, Enum):
    WRITTEN = "written"
    NO_PACKAGES = "no_packages"
    DETECTION_FAILED = "detection_failed"
    ALL_EXCLUDED = "all_excluded"


class ChangesetResult(BaseModel):
    """What the changeset writer did.

    Every outcome is a success from the orchestrator's point of view;
    failures that should stop CI are raised instead.
    """

    outcome: ChangesetOutcome
    path: str | None = None
    content: str | None = None
    packages: list[str] = Field(default_factory=list)


class ReleaseTag(BaseModel):
    """A `<package>@<version>` tag split into its parts.

    Attributes:
        tag: The full tag name.
        package: Everything before the last "@" (scoped names keep their "@").
        version: Everything after the last "@", or None if there is none.
    """

    tag: str
    package: str
    version: str | None = None


class ReleaseOutcome(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class ReleaseAttempt(BaseModel):
    tag: str
    outcome: ReleaseOutcome
    error: str | None = None


class ReleaseStatistics(BaseModel):
    """Counts per outcome for one run of the release publisher."""

    total: int
    created: int
    skipped: int
    failed: int
    duration: float

    @property
    def duration_display(self) -> str:
        """Elapsed seconds with one decimal place (e.g. "2.4")."""
        return f"{self.duration:.1f}"


class ReleaseReport(BaseModel):
    """All attempts of a run, in processing order, plus their statistics.

    Attributes:
        attempts: One entry per tag found at HEAD.
        statistics: Aggregated counts, or None when no tags were found.
    """

    attempts: list[ReleaseAttempt] = Field(default_factory=list)
    statistics: ReleaseStatistics | None = None

    @property
    def exit_code(self) -> int:
        """1 if any release failed, 0 otherwise."""
        return 1 if self.statistics is not None and self.statistics.failed > 0 else 0
