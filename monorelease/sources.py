"""External collaborators: the build graph, git and the GitHub CLI.

The changeset writer and release publisher only talk to these through the
small protocols below, so tests can substitute in-memory fakes for real
subprocesses.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .shell import capture, git
from .versions import is_prerelease


class AffectedPackageSource(Protocol):
    def query(self) -> str:
        """Return the raw JSON report of affected packages."""
        ...


class TagSource(Protocol):
    def tags_at_head(self) -> list[str]:
        ...


class ReleasePublisher(Protocol):
    def create(self, tag: str) -> None:
        """Create a release for the tag, raising on failure."""
        ...


class TurboAffectedPackages:
    """Asks turbo which packages changed relative to the base ref.

    The command is fixed by configuration; nothing from the change itself
    is interpolated into it.
    """

    def __init__(self, command: Sequence[str]) -> None:
        self.command = list(command)

    def query(self) -> str:
        return capture(self.command)


class GitTagSource:
    def tags_at_head(self) -> list[str]:
        """List tags pointing at HEAD, in the order git reports them."""
        output = git("tag", "--points-at", "HEAD")
        return [line.strip() for line in output.splitlines() if line.strip()]


class GhReleasePublisher:
    """Creates GitHub releases with the gh CLI."""

    def __init__(self, *, generate_notes: bool = True) -> None:
        self.generate_notes = generate_notes

    def command(self, tag: str) -> list[str]:
        cmd = ["gh", "release", "create", tag]
        if self.generate_notes:
            cmd.append("--generate-notes")
        if is_prerelease(tag):
            cmd.append("--prerelease")
        return cmd

    def create(self, tag: str) -> None:
        capture(self.command(tag))
