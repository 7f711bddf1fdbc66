"""Changeset writer: detect → filter → build → write.

Runs on a pull request and records the intended version bump for every
package the change touched:
1. Ask the build graph which packages are affected
2. Drop config/tooling packages matching the exclusion patterns
3. Build the changeset (frontmatter + pull request reference + summary)
4. Write it to the changeset directory under a timestamped name

Not being able to detect changes must never block a pull request, so a
failing or garbled detector is reported and treated as "nothing to do".
Anything that goes wrong after detection succeeded is raised.
"""

from __future__ import annotations

import json
import subprocess
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import ChangesetConfig
from .github import pull_request_url
from .models import (
    AffectedPackage,
    BumpType,
    ChangeRecord,
    ChangesetOutcome,
    ChangesetResult,
)
from .shell import info, warn
from .sources import AffectedPackageSource


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def detect_affected_packages(
    source: AffectedPackageSource,
) -> list[AffectedPackage] | None:
    """Query the build graph for affected packages.

    The report is expected to look like
    ``{"packages": {"count": N, "items": [{"name": ...}, ...]}}``; a report
    without that nesting means no packages.

    Returns:
        The affected packages, or None if the detector failed or printed
        something that is not JSON.

    Raises:
        pydantic.ValidationError: If an item is not a package descriptor.
    """
    print("🔍 Detecting affected packages...")
    try:
        payload = json.loads(source.query())
    except (subprocess.CalledProcessError, OSError, ValueError) as exc:
        warn(f"Could not detect affected packages: {_first_line(exc)}")
        info("This might mean no packages are affected. Exiting gracefully.")
        return None

    items: list[object] = []
    if isinstance(payload, dict):
        packages = payload.get("packages")
        if isinstance(packages, dict):
            items = packages.get("items") or []

    affected = [AffectedPackage.model_validate(item) for item in items]
    print(f"   Found {len(affected)} affected package(s)")
    return affected


def _first_line(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError) and exc.stderr:
        return exc.stderr.strip().splitlines()[0]
    return str(exc).splitlines()[0] if str(exc) else type(exc).__name__


def is_excluded(name: str, patterns: Sequence[str]) -> bool:
    """Whether any pattern occurs anywhere in the package name."""
    return any(pattern in name for pattern in patterns)


def filter_excluded_packages(
    packages: Sequence[AffectedPackage], patterns: Sequence[str]
) -> list[AffectedPackage]:
    """Drop packages whose name contains an exclusion pattern.

    Matching is a plain, case-sensitive substring test. Order is preserved.
    """
    included: list[AffectedPackage] = []
    for pkg in packages:
        if is_excluded(pkg.name, patterns):
            print(f"   ⊘ Excluding config package: {pkg.name}")
            continue
        included.append(pkg)
    return included


def format_reference(pr_number: str | None, repository: str | None) -> str:
    """Render the pull request reference line.

    Examples:
        ("42", "org/repo") → "[#42](https://github.com/org/repo/pull/42)"
        ("42", None) → "#42" (GitHub auto-links it)
        (None, "org/repo") → ""
    """
    if not pr_number:
        return ""
    if repository:
        return f"[#{pr_number}]({pull_request_url(repository, pr_number)})"
    return f"#{pr_number}"


def build_change_record(
    packages: Sequence[AffectedPackage],
    *,
    bump: BumpType,
    summary: str,
    pr_number: str | None = None,
    repository: str | None = None,
) -> ChangeRecord:
    """Build the changeset for the included packages.

    Every package gets the same bump type. A name reported twice appears
    once, at its first position.
    """
    releases: dict[str, BumpType] = {}
    for pkg in packages:
        releases.setdefault(pkg.name, bump)
    return ChangeRecord(
        releases=releases,
        reference=format_reference(pr_number, repository),
        summary=summary,
    )


def changeset_filename(timestamp_ms: int) -> str:
    return f"auto-{timestamp_ms}.md"


def write_change_record(
    content: str, directory: str, *, clock: Callable[[], int] = _now_ms
) -> str:
    """Write changeset content to ``<directory>/auto-<epoch ms>.md``.

    The directory must already exist (it is created when the changeset
    tool is initialised in the repo).

    Returns:
        The path written, relative to the working directory.

    Raises:
        OSError: If the file cannot be written.
    """
    relative = Path(directory) / changeset_filename(clock())
    (Path.cwd() / relative).write_text(content, encoding="utf-8")
    return relative.as_posix()


def generate_changeset(
    config: ChangesetConfig,
    source: AffectedPackageSource,
    *,
    summary: str | None = None,
    pr_number: str | None = None,
    repository: str | None = None,
    clock: Callable[[], int] = _now_ms,
) -> ChangesetResult:
    """Run the whole changeset flow.

    Args:
        config: Bump type, exclusion patterns and target directory.
        source: Where affected packages come from.
        summary: Changeset description; the configured default if empty.
        pr_number: Pull request number for the reference line.
        repository: "owner/repo", used to link the pull request.
        clock: Millisecond timestamp used in the file name.

    Returns:
        The outcome; every outcome is a success for the caller.
    """
    affected = detect_affected_packages(source)
    if affected is None:
        return ChangesetResult(outcome=ChangesetOutcome.DETECTION_FAILED)
    if not affected:
        info("No affected packages found. Skipping changeset generation.")
        return ChangesetResult(outcome=ChangesetOutcome.NO_PACKAGES)

    included = filter_excluded_packages(affected, config.exclude)
    if not included:
        info(
            "All affected packages are excluded (config/tooling). "
            "Skipping changeset generation."
        )
        return ChangesetResult(outcome=ChangesetOutcome.ALL_EXCLUDED)

    print(f"✅ {len(included)} package(s) will be included in changeset:")
    for pkg in included:
        print(f"   • {pkg.name}")

    record = build_change_record(
        included,
        bump=config.bump,
        summary=summary or config.default_summary,
        pr_number=pr_number,
        repository=repository,
    )
    content = record.render()
    path = write_change_record(content, config.directory, clock=clock)

    print()
    print("🎉 Changeset generated successfully!")
    print(f"   File: {path}")
    print()
    print("📄 Changeset content:")
    print("─" * 37)
    print(content)
    print("─" * 37)

    return ChangesetResult(
        outcome=ChangesetOutcome.WRITTEN,
        path=path,
        content=content,
        packages=list(record.releases),
    )
