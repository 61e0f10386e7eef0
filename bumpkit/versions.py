"""Version parsing, bumping and next-version resolution.

Wraps semver.Version with the increment rules release tooling expects:
prerelease lines continue instead of restarting, a plain bump of a
prerelease finalizes it ("1.0.0-rc.1" → "1.0.0" for major), and build
metadata is dropped by increments but kept on exact-version overrides.
"""

from __future__ import annotations

import re

import semver

from .errors import ConflictingPrereleaseError, InvalidReleaseTypeError
from .models import ReleaseSignal

RELEASE_TYPES = ("major", "minor", "patch")
INCREMENT_TYPES = RELEASE_TYPES + ("premajor", "preminor", "prepatch", "prerelease")

# Lowest priority first
_TYPE_PRIORITY = ("patch", "minor", "major")
_LOOSE_PREFIX = re.compile(r"^[v=\s]+")


def clean_version(version_str: str) -> str:
    """Strip a leading "v"/"=" and surrounding whitespace: " v1.2.3" → "1.2.3"."""
    return _LOOSE_PREFIX.sub("", version_str.strip())


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    A leading "v" or "=" is tolerated. Everything else must be strict semver,
    so incomplete versions such as "1.2" are rejected with ValueError.
    """
    return semver.Version.parse(clean_version(version_str))


def is_valid(version_str: object) -> bool:
    """Return True if version_str parses as a semver version."""
    if not isinstance(version_str, str):
        return False
    try:
        parse_version(version_str)
    except ValueError:
        return False
    return True


def _split_prerelease(prerelease: str | None) -> list[str | int]:
    if not prerelease:
        return []
    return [int(part) if part.isdigit() else part for part in prerelease.split(".")]


def _join_prerelease(parts: list[str | int]) -> str | None:
    return ".".join(str(part) for part in parts) or None


def _bump_prerelease(parts: list[str | int], identifier: str | None) -> list[str | int]:
    """Advance a prerelease segment.

    The right-most numeric part is incremented ("rc.1" → "rc.2"); a segment
    without one gets ".0" appended. A different identifier starts a new line
    at zero ("alpha.3" with "beta" → "beta.0").
    """
    parts = list(parts)
    if not parts:
        parts = [0]
    else:
        for i in range(len(parts) - 1, -1, -1):
            if isinstance(parts[i], int):
                parts[i] += 1
                break
        else:
            parts.append(0)

    if identifier:
        if parts[0] != identifier or len(parts) < 2 or not isinstance(parts[1], int):
            parts = [identifier, 0]
    return parts


def increment(
    version_str: str, release_type: str, identifier: str | None = None
) -> str:
    """Increment a version by a release type.

    Examples:
        increment("1.2.3", "minor") → "1.3.0"
        increment("1.2.3", "prepatch", "dev") → "1.2.4-dev.0"
        increment("1.2.4-dev.0", "prerelease", "dev") → "1.2.4-dev.1"
        increment("2.0.0-rc.1", "major") → "2.0.0"
    """
    v = parse_version(version_str)
    major, minor, patch = v.major, v.minor, v.patch
    pre = _split_prerelease(v.prerelease)

    if release_type == "premajor":
        major, minor, patch = major + 1, 0, 0
        pre = _bump_prerelease([], identifier)
    elif release_type == "preminor":
        minor, patch = minor + 1, 0
        pre = _bump_prerelease([], identifier)
    elif release_type == "prepatch":
        patch += 1
        pre = _bump_prerelease([], identifier)
    elif release_type == "prerelease":
        if not pre:
            patch += 1
        pre = _bump_prerelease(pre, identifier)
    elif release_type == "major":
        if minor or patch or not pre:
            major += 1
        minor, patch, pre = 0, 0, []
    elif release_type == "minor":
        if patch or not pre:
            minor += 1
        patch, pre = 0, []
    elif release_type == "patch":
        if not pre:
            patch += 1
        pre = []
    else:
        raise InvalidReleaseTypeError(release_type)

    return str(semver.Version(major, minor, patch, _join_prerelease(pre)))


def with_build(version_str: str, build: str | None) -> str:
    """Append build metadata, if any: ("1.0.0", "b.7") → "1.0.0+b.7"."""
    return f"{version_str}+{build}" if build else version_str


def prerelease_identifier(version: semver.Version) -> str:
    """Return the prerelease identifier without its counter: "1.0.0-rc.1" → "rc"."""
    parts = (version.prerelease or "").split(".")
    return ".".join(parts[:-1])


def active_release_type(version: semver.Version) -> str | None:
    """Return which component a prerelease is heading for.

    "1.1.0-dev.0" is a minor prerelease, "2.0.0-rc.1" a major one.
    """
    for release_type in _TYPE_PRIORITY:
        if getattr(version, release_type):
            return release_type
    return None


def _priority(release_type: str | None) -> int:
    return _TYPE_PRIORITY.index(release_type) if release_type else -1


def release_type_for(expected: str, current: str, prerelease: str | None) -> str:
    """Pick the increment type for a release-type signal.

    Without a prerelease identifier this is just ``expected``. With one, an
    ongoing prerelease line is continued when it already targets the same or
    a bigger component; otherwise a new ``pre<type>`` line starts.
    """
    if prerelease is None:
        return expected

    version = parse_version(current)
    if version.prerelease:
        active = active_release_type(version)
        if active == expected or _priority(active) > _priority(expected):
            return "prerelease"
    return "pre" + expected


def validate_release_as(release_as: str | None) -> None:
    """Reject a release_as override that is neither a release type nor semver."""
    if not release_as:
        return
    if release_as.lower() in RELEASE_TYPES or is_valid(release_as):
        return
    raise InvalidReleaseTypeError(release_as)


def signal_from_release_as(release_as: str) -> ReleaseSignal:
    """Build an explicit ReleaseSignal from a --release-as value."""
    validate_release_as(release_as)
    if release_as.lower() in RELEASE_TYPES:
        return ReleaseSignal(release_type=release_as.lower(), explicit=True)
    return ReleaseSignal(version=clean_version(release_as), explicit=True)


def _resolve_exact(current: str, release_as: str, prerelease: str | None) -> str:
    target = parse_version(release_as)

    if prerelease is not None and target.prerelease:
        if prerelease_identifier(target) != prerelease:
            raise ConflictingPrereleaseError(release_as, prerelease)
        candidate = target.replace(build=None)
    elif prerelease is not None:
        candidate = semver.Version(
            target.major,
            target.minor,
            target.patch,
            _join_prerelease(_bump_prerelease([], prerelease)),
        )
    else:
        candidate = target.replace(build=None)

    # Re-releasing the same prerelease target continues the line
    if prerelease is not None:
        previous = parse_version(current)
        if (
            previous.prerelease
            and previous.finalize_version() == candidate.finalize_version()
            and candidate.compare(previous) <= 0
        ):
            candidate = parse_version(increment(current, "prerelease", prerelease))

    return with_build(str(candidate), target.build)


def resolve_next_version(
    current: str,
    signal: ReleaseSignal | None,
    *,
    prerelease: str | None = None,
    first_release: bool = False,
    skip_bump: bool = False,
) -> str:
    """Compute the next version.

    Inputs apply in precedence order:

    1. ``skip_bump`` or ``first_release``: the current version is returned.
    2. An exact version signal: adopted as-is, or seeded as
       ``X.Y.Z-<prerelease>.0`` when a prerelease identifier is requested.
       Repeating the same prerelease target increments its counter instead
       of regressing. Build metadata from the override is kept.
    3. A release-type signal: a plain increment, or a prerelease increment
       that continues the current prerelease line when it targets the same
       or a bigger component.

    A major bump recommended from commit history (``signal.explicit`` False)
    is demoted to minor while the current major version is 0.

    Args:
        current: The current version (strict semver).
        signal: The release signal; may be None only when skipping.
        prerelease: Prerelease identifier, "" for an unnamed prerelease, or
                    None for a regular release.
        first_release: Keep the current version (seeding the first tag).
        skip_bump: The bump step is disabled.

    Raises:
        ConflictingPrereleaseError: The exact version's prerelease identifier
            differs from ``prerelease``.
    """
    if skip_bump or first_release:
        return current
    if signal is None:
        raise ValueError("A release signal is required to compute the next version")

    if signal.version is not None:
        return _resolve_exact(current, signal.version, prerelease)

    release_type = signal.release_type
    if (
        not signal.explicit
        and release_type == "major"
        and parse_version(current).major == 0
    ):
        release_type = "minor"

    increment_type = release_type_for(release_type, current, prerelease)
    return increment(current, increment_type, prerelease)
