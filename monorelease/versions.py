"""Tag and version parsing utilities.

Tags written by the changeset tool look like ``<package>@<version>``, where
the package name may itself start with "@" (``@repo/ui@0.3.0``).
"""

from __future__ import annotations

import semver

from .models import ReleaseTag


def split_tag(tag: str) -> ReleaseTag:
    """Split a tag at its last "@" into package name and version.

    Examples:
        "docs@1.0.1" → package "docs", version "1.0.1"
        "@repo/ui@0.3.0" → package "@repo/ui", version "0.3.0"
        "v1.0.0" → package "v1.0.0", no version
    """
    package, sep, version = tag.rpartition("@")
    if not sep or not package:
        return ReleaseTag(tag=tag, package=tag)
    return ReleaseTag(tag=tag, package=package, version=version)


def parse_version(version_str: str) -> semver.Version | None:
    """Parse a version string, returning None if it is not valid semver."""
    try:
        return semver.Version.parse(version_str)
    except ValueError:
        return None


def is_prerelease(tag: str) -> bool:
    """Whether the tag's version carries a prerelease part (e.g. 2.0.0-beta.1)."""
    version = split_tag(tag).version
    if version is None:
        return False
    parsed = parse_version(version)
    return parsed is not None and parsed.prerelease is not None
