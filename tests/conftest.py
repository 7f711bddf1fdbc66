"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from monorelease.config import ChangesetConfig, ReleaseConfig


@pytest.fixture
def changeset_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An initialised repo root with an empty .changeset directory as cwd."""
    directory = tmp_path / ".changeset"
    directory.mkdir()
    monkeypatch.chdir(tmp_path)
    return directory


@pytest.fixture
def changeset_config() -> ChangesetConfig:
    return ChangesetConfig(bump="minor", exclude=["typescript-config", "eslint-config"])


@pytest.fixture
def release_config() -> ReleaseConfig:
    return ReleaseConfig(prefixes=["docs@", "web@"])
