"""The bump step: read the current version, resolve the next one, rewrite files.

Everything that can fail on configuration (release_as validation, updater
resolution, custom updater loading, conflicting prerelease identifiers)
happens before the first file is written. Failures on the primary package
file abort the run; failures on secondary bump files are logged and the
file is skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .commits import recommend_release_type
from .config import ReleaseConfig
from .errors import (
    MalformedContentError,
    NoPackageFileError,
    UnsupportedFileError,
    VersionReadError,
)
from .hooks import run_lifecycle_script
from .models import BumpResult, ResolvedFile
from .registry import resolve_file
from .shell import checkpoint, git_succeeds
from .tags import latest_semver_tag
from .versions import (
    clean_version,
    is_valid,
    resolve_next_version,
    signal_from_release_as,
    validate_release_as,
)

logger = logging.getLogger(__name__)

_QUOTES = re.compile(r"[\"']")


def read_file(path: Path) -> str:
    """Read a file as UTF-8 text, keeping its line endings untouched."""
    return path.read_bytes().decode("utf-8")


def write_file(path: Path, content: str) -> None:
    """Write UTF-8 text without newline translation."""
    path.write_bytes(content.encode("utf-8"))


def is_ignored(filename: str, root: Path) -> bool:
    """Return True if git ignores filename. Outside a repository nothing is ignored."""
    try:
        return git_succeeds("check-ignore", "--quiet", "--", filename, cwd=root)
    except OSError as exc:
        logger.debug("Cannot run git to check ignore rules for %s: %s", filename, exc)
        return False


def read_current_version(config: ReleaseConfig, root: Path) -> str:
    """Return the current version.

    It is read from the first package file that exists; when none does, from
    the latest release tag (unless git_tag_fallback is off).

    Raises:
        UnsupportedFileError: A package file has no updater.
        VersionReadError: The primary package file holds no valid version.
        NoPackageFileError: No package file exists and the fallback is off.
    """
    for spec in config.package_files:
        resolved = resolve_file(spec, root)
        path = root / resolved.filename
        if not path.is_file():
            logger.debug("Package file %s not found, skipping", resolved.filename)
            continue

        version = resolved.updater.read_version(read_file(path))
        if not is_valid(version):
            raise MalformedContentError(
                f"{resolved.filename} does not contain a valid semver version "
                f"(found {version!r})"
            )
        logger.debug("Read version %s from %s", version, resolved.filename)
        return clean_version(version)

    if config.git_tag_fallback:
        version = latest_semver_tag(config.tag_prefix, config.prerelease, cwd=root)
        logger.debug("No package file found, using version %s from git tags", version)
        return version

    raise NoPackageFileError(
        "No package file found. Configure packageFiles or enable the git tag fallback."
    )


def resolve_bump_files(config: ReleaseConfig, root: Path) -> list[ResolvedFile]:
    """Resolve every effective bump file to its updater.

    Files without an updater are logged and left out. Configuration errors
    (unknown type, broken custom updater) propagate.
    """
    resolved = []
    for spec in config.effective_bump_files:
        try:
            resolved.append(resolve_file(spec, root))
        except UnsupportedFileError as exc:
            logger.warning(
                "Unable to obtain updater for: %s\n - Error: %s\n - Skipping...",
                spec.filename,
                exc,
            )
    return resolved


def update_files(
    files: list[ResolvedFile],
    version: str,
    root: Path,
    *,
    dry_run: bool = False,
    silent: bool = False,
) -> list[str]:
    """Write version into each file and return the names of those updated.

    Ignored, missing and non-regular files are skipped with a debug message;
    files whose content an updater cannot handle are skipped with a warning.
    Every new content is computed before the first file is written. In
    dry-run mode nothing is written but the would-be updates are reported.
    """
    pending: list[tuple[Path, str, str | None, str, str]] = []
    for resolved in files:
        filename = resolved.filename
        if is_ignored(filename, root):
            logger.debug("Not updating file %s, as it is ignored in Git", filename)
            continue

        path = root / filename
        if not path.exists():
            logger.debug("Not updating file %s, as it does not exist", filename)
            continue
        if not path.is_file():
            logger.debug("Not updating %s, as it is not a file", filename)
            continue

        content = read_file(path)
        try:
            previous = resolved.updater.read_version(content)
            new_content = resolved.updater.write_version(content, version)
            written = resolved.updater.read_version(new_content)
        except (VersionReadError, ValueError) as exc:
            logger.warning("Unable to update version in %s: %s", filename, exc)
            continue

        if written != version:
            logger.warning(
                "%s reads back %r after writing %r", filename, written, version
            )
        pending.append((path, filename, previous, written, new_content))

    for path, filename, previous, written, new_content in pending:
        checkpoint(
            "bumping version in %s from %s to %s",
            filename,
            previous,
            written,
            silent=silent,
        )
        if not dry_run:
            write_file(path, new_content)
    return [filename for _, filename, _, _, _ in pending]


def bump(config: ReleaseConfig, root: Path | None = None) -> BumpResult:
    """Run the bump step of a release.

    Args:
        config: Release configuration.
        root: Project root that configured paths are relative to. Defaults to
              the current working directory.

    Returns:
        The previous and next version and the files that were rewritten.
    """
    root = root or Path.cwd()
    validate_release_as(config.release_as)

    current = read_current_version(config, root)
    if config.skip.bump:
        return BumpResult(previous=current, version=current)

    run_lifecycle_script(config, "prerelease", cwd=root)

    release_as = config.release_as
    stdout = run_lifecycle_script(config, "prebump", cwd=root)
    if stdout and stdout.strip():
        candidate = _QUOTES.sub("", stdout.strip())
        if is_valid(candidate):
            release_as = candidate

    files = resolve_bump_files(config, root)

    if config.first_release:
        checkpoint(
            "skip version bump on first release", silent=config.silent, figure="✖"
        )
        result = BumpResult(previous=current, version=current)
    else:
        if release_as:
            signal = signal_from_release_as(release_as)
        else:
            signal = recommend_release_type(config.tag_prefix, cwd=root)
        version = resolve_next_version(current, signal, prerelease=config.prerelease)
        updated = update_files(
            files, version, root, dry_run=config.dry_run, silent=config.silent
        )
        result = BumpResult(previous=current, version=version, updated_files=updated)

    run_lifecycle_script(config, "postbump", cwd=root)
    return result
