"""Release tag lookup.

Release tags are ``<tag_prefix><semver>`` (e.g. "v1.2.3"). Tags that do not
parse as semver after the prefix is removed are ignored.
"""

from __future__ import annotations

from pathlib import Path

import semver

from .shell import git
from .versions import is_valid, parse_version

DEFAULT_VERSION = "1.0.0"


def semver_tags(
    tag_prefix: str, cwd: Path | None = None
) -> list[tuple[str, semver.Version]]:
    """Return (tag, version) pairs for every release tag reachable from HEAD."""
    output = git(
        "tag", "--list", f"{tag_prefix}*", "--merged", "HEAD", check=False, cwd=cwd
    )
    tags = []
    for tag in output.splitlines():
        tag = tag.strip()
        if not tag.startswith(tag_prefix):
            continue
        version = tag[len(tag_prefix) :]
        if is_valid(version):
            tags.append((tag, parse_version(version)))
    return tags


def latest_tag(tag_prefix: str, cwd: Path | None = None) -> str | None:
    """Return the name of the highest release tag, or None if there is none."""
    tags = semver_tags(tag_prefix, cwd)
    if not tags:
        return None
    return max(tags, key=lambda pair: pair[1])[0]


def latest_semver_tag(
    tag_prefix: str = "v", prerelease: str | None = None, cwd: Path | None = None
) -> str:
    """Return the highest released version according to git tags.

    When a prerelease identifier is given, prerelease tags of other lines are
    ignored ("v2.0.0-beta.1" does not count for an "alpha" release). With no
    release tags at all, "1.0.0" is returned.
    """
    versions = [version for _, version in semver_tags(tag_prefix, cwd)]
    if prerelease:
        versions = [
            version
            for version in versions
            if not version.prerelease or version.prerelease.split(".")[0] == prerelease
        ]
    if not versions:
        return DEFAULT_VERSION
    return str(max(versions))
