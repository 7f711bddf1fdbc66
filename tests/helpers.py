"""In-memory stand-ins for turbo, git and gh used across the tests."""

from __future__ import annotations

import json
import subprocess


class FakeAffectedSource:
    """Returns a canned report, or raises the given error."""

    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.calls = 0

    def query(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.output


class FakeTagSource:
    def __init__(self, tags: list[str], error: Exception | None = None) -> None:
        self.tags = tags
        self.error = error

    def tags_at_head(self) -> list[str]:
        if self.error is not None:
            raise self.error
        return list(self.tags)


class FakePublisher:
    """Records created tags; tags listed in ``failures`` raise instead."""

    def __init__(self, failures: dict[str, Exception] | None = None) -> None:
        self.failures = failures or {}
        self.created: list[str] = []
        self.calls: list[str] = []

    def create(self, tag: str) -> None:
        self.calls.append(tag)
        if tag in self.failures:
            raise self.failures[tag]
        self.created.append(tag)


def turbo_report(*names: str) -> str:
    """Build a `turbo ls --affected --output json` style report."""
    items = [{"name": name, "path": f"packages/{name.split('/')[-1]}"} for name in names]
    return json.dumps({"packages": {"count": len(items), "items": items}})


def gh_failure(stderr: str) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(
        1, ["gh", "release", "create"], output="", stderr=stderr
    )
