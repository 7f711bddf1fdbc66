"""GitHub and GitHub Actions helpers.

URL construction for pull requests and releases, and the step summary that
GitHub Actions renders on the workflow run page.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

GITHUB_URL = "https://github.com"


def pull_request_url(repository: str, number: str) -> str:
    return f"{GITHUB_URL}/{repository}/pull/{number}"


def release_url(repository: str, tag: str) -> str:
    """URL of the release page for a tag.

    The tag is percent-encoded, so "docs@1.0.0" becomes "docs%401.0.0".
    """
    return f"{GITHUB_URL}/{repository}/releases/tag/{quote(tag, safe='')}"


class StepSummary:
    """Appends markdown lines to the GitHub Actions step summary file.

    Every method is a no-op when no summary path is configured, so the
    publisher can run unchanged outside of CI.
    """

    def __init__(self, path: str | Path | None) -> None:
        self.path = Path(path) if path else None

    def append(self, line: str = "") -> None:
        if self.path is None:
            return
        with open(self.path, "a", encoding="utf-8") as fh:
            fh.write(f"{line}\n")

    def extend(self, lines: list[str]) -> None:
        for line in lines:
            self.append(line)
