"""Release publisher: scan tags at HEAD → classify → create → report.

After the changeset tool has bumped versions and tagged the release commit,
every tag at HEAD is classified by prefix. Application tags get a GitHub
release with generated notes; library tags are versioned but not released.

Each tag is handled independently: a failed release does not stop the
remaining tags, but it does make the whole run fail once all tags are done.
Nothing is retried and nothing already created is rolled back.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable, Sequence
from typing import Literal

from .config import ReleaseConfig
from .github import StepSummary, release_url
from .models import ReleaseAttempt, ReleaseOutcome, ReleaseReport, ReleaseStatistics
from .shell import step
from .sources import ReleasePublisher, TagSource

TagKind = Literal["app", "non-app"]

SUMMARY_HEADER = "## 🚀 GitHub Releases Created"


def detect_tags_at_head(source: TagSource) -> list[str]:
    """List the tags pointing at HEAD.

    Raises:
        subprocess.CalledProcessError: If git fails. Unlike package
            detection this is an infrastructure failure, not "no tags".
    """
    step("Detecting tags at HEAD")
    tags = source.tags_at_head()
    for tag in tags:
        print(f"  {tag}")
    return tags


def is_releasable(tag: str, prefixes: Sequence[str]) -> bool:
    """Whether the tag starts with one of the application prefixes.

    Examples, with prefixes ["docs@", "web@"]:
        "docs@1.0.0" → True
        "web@2.1.0" → True
        "@repo/ui@1.0.0" → False
    """
    return any(tag.startswith(prefix) for prefix in prefixes)


def classify_tag(tag: str, prefixes: Sequence[str]) -> TagKind:
    """Classify a tag as an application ("app") or library ("non-app") tag."""
    return "app" if is_releasable(tag, prefixes) else "non-app"


def error_summary(exc: Exception) -> str:
    """First line of a failure's error text, for compact reporting."""
    text = ""
    if isinstance(exc, subprocess.CalledProcessError):
        text = (exc.stderr or "").strip()
    if not text:
        text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


def create_release(tag: str, publisher: ReleasePublisher) -> ReleaseAttempt:
    """Create the release for one tag, capturing failure instead of raising."""
    print(f"  ✅ Creating release for {tag}")
    try:
        publisher.create(tag)
    except Exception as exc:
        message = error_summary(exc)
        print(f"  ❌ Failed to create release for {tag}: {message}")
        return ReleaseAttempt(tag=tag, outcome=ReleaseOutcome.FAILED, error=message)
    return ReleaseAttempt(tag=tag, outcome=ReleaseOutcome.CREATED)


def process_tag(
    tag: str, prefixes: Sequence[str], publisher: ReleasePublisher
) -> ReleaseAttempt:
    if classify_tag(tag, prefixes) == "non-app":
        print(f"  ⏭️  Skipping release for {tag} (not an app)")
        return ReleaseAttempt(tag=tag, outcome=ReleaseOutcome.SKIPPED)
    return create_release(tag, publisher)


def summary_line(attempt: ReleaseAttempt, repository: str | None) -> str:
    if attempt.outcome is ReleaseOutcome.CREATED:
        if not repository:
            return f"- ✅ {attempt.tag}"
        return f"- ✅ [{attempt.tag}]({release_url(repository, attempt.tag)})"
    if attempt.outcome is ReleaseOutcome.SKIPPED:
        return f"- ⏭️ {attempt.tag} (skipped: not an app)"
    return f"- ❌ {attempt.tag} (failed: {attempt.error})"


def calculate_statistics(
    attempts: Sequence[ReleaseAttempt], duration: float
) -> ReleaseStatistics:
    def count(outcome: ReleaseOutcome) -> int:
        return sum(1 for a in attempts if a.outcome is outcome)

    return ReleaseStatistics(
        total=len(attempts),
        created=count(ReleaseOutcome.CREATED),
        skipped=count(ReleaseOutcome.SKIPPED),
        failed=count(ReleaseOutcome.FAILED),
        duration=duration,
    )


def statistics_lines(stats: ReleaseStatistics) -> list[str]:
    return [
        "",
        "---",
        "### 📊 Statistics",
        f"- **Total Tags**: {stats.total}",
        f"- **Releases Created**: {stats.created}",
        f"- **Skipped**: {stats.skipped}",
        f"- **Failed**: {stats.failed}",
        f"- **Duration**: {stats.duration_display}s",
        "",
    ]


def publish_releases(
    config: ReleaseConfig,
    tags: TagSource,
    publisher: ReleasePublisher,
    *,
    summary: StepSummary | None = None,
    repository: str | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> ReleaseReport:
    """Create GitHub releases for the application tags at HEAD.

    Args:
        config: Releasable tag prefixes.
        tags: Where tags at HEAD come from.
        publisher: Creates one release per call.
        summary: Step summary to report into; nothing is written if None.
        repository: "owner/repo", used to link created releases.
        clock: Seconds source for the duration statistic.

    Returns:
        The per-tag attempts and statistics. Statistics are None when there
        were no tags at HEAD.
    """
    started = clock()
    summary = summary or StepSummary(None)
    summary.extend([SUMMARY_HEADER, ""])

    found = detect_tags_at_head(tags)
    if not found:
        print("  No tags found at HEAD, no releases to create.")
        summary.extend(
            ["## 🚀 GitHub Releases", "", "**Status**: ⏭️ No tags found at HEAD", ""]
        )
        return ReleaseReport()

    step(f"Processing {len(found)} tags")
    attempts: list[ReleaseAttempt] = []
    for tag in found:
        attempt = process_tag(tag, config.prefixes, publisher)
        attempts.append(attempt)
        summary.append(summary_line(attempt, repository))
        print(f"  [{len(attempts)}/{len(found)}] {tag}: {attempt.outcome.value}")

    stats = calculate_statistics(attempts, clock() - started)
    summary.extend(statistics_lines(stats))
    return ReleaseReport(attempts=attempts, statistics=stats)
