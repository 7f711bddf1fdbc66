"""Release policy configuration.

Policy (bump type, exclusion patterns, releasable tag prefixes) lives in an
optional ``monorelease.toml`` at the repo root and is parsed with tomlkit.
Every value has a default, so a repo without the file gets the stock
behaviour:

    [changeset]
    bump = "minor"
    exclude = ["typescript-config", "eslint-config"]
    directory = ".changeset"

    [release]
    prefixes = ["docs@", "web@"]
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .models import BumpType
from .shell import fatal

CONFIG_FILE = "monorelease.toml"


class ChangesetConfig(BaseModel):
    """Policy for the changeset writer.

    Attributes:
        bump: Bump type applied to every affected package.
        exclude: Substrings; a package whose name contains any of them is
                 left out of the changeset (config/tooling packages).
        directory: Directory the changeset tool reads changesets from.
        default_summary: Description used when none is given.
        affected_command: Command printing the affected packages as JSON.
    """

    bump: BumpType = "minor"
    exclude: list[str] = Field(
        default_factory=lambda: ["typescript-config", "eslint-config"]
    )
    directory: str = ".changeset"
    default_summary: str = "Update affected packages"
    affected_command: list[str] = Field(
        default_factory=lambda: ["pnpm", "turbo", "ls", "--affected", "--output", "json"]
    )


class ReleaseConfig(BaseModel):
    """Policy for the release publisher.

    Attributes:
        prefixes: Tags starting with one of these get a GitHub release.
        generate_notes: Ask GitHub to generate notes from the commit history.
    """

    prefixes: list[str] = Field(default_factory=lambda: ["docs@", "web@"])
    generate_notes: bool = True


class MonoreleaseConfig(BaseModel):
    changeset: ChangesetConfig = Field(default_factory=ChangesetConfig)
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)


def load_config(path: Path | None = None) -> MonoreleaseConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit config file. When None, ``monorelease.toml`` in the
              current directory is used if it exists, defaults otherwise.

    Raises:
        SystemExit: If an explicit file is missing, or the file is not valid
                    TOML or holds invalid values.
    """
    if path is None:
        path = Path.cwd() / CONFIG_FILE
        if not path.exists():
            return MonoreleaseConfig()
    elif not path.exists():
        fatal(f"Config file not found: {path}")

    try:
        doc = tomlkit.parse(path.read_text())
    except TOMLKitError as exc:
        fatal(f"Invalid TOML in {path}: {exc}")

    try:
        return MonoreleaseConfig.model_validate(doc.unwrap())
    except ValidationError as exc:
        fatal(f"Invalid configuration in {path}:\n{exc}")
