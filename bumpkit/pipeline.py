"""Release pipeline: bump → changelog → commit → tag.

This module orchestrates a release run:
1. Read the current version and resolve the next one (bumpkit.bump)
2. Rewrite the version in every configured bump file
3. Add a release section to the changelog
4. Commit the changed files
5. Create the release tag

Each step can be skipped through ReleaseConfig.skip, and dry_run reports
every step without writing files or running git.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .bump import bump
from .changelog import update_changelog
from .commits import Commit, get_commits
from .config import ReleaseConfig
from .hooks import run_lifecycle_script
from .models import BumpResult
from .shell import checkpoint, git
from .tags import latest_tag

logger = logging.getLogger(__name__)


def format_commit_message(message_format: str, version: str) -> str:
    """Fill every {{currentTag}} placeholder with version."""
    return message_format.replace("{{currentTag}}", version)


def commit_release(config: ReleaseConfig, result: BumpResult, root: Path) -> None:
    """Stage and commit the changelog and the files the bump step rewrote."""
    if config.skip.commit:
        return

    message = run_lifecycle_script(config, "precommit", cwd=root)
    message_format = config.release_commit_message_format
    if message and message.strip():
        message_format = message.strip()

    to_add: list[str] = []
    if not config.skip.changelog:
        to_add.append(config.infile)
    to_add.extend(result.updated_files)

    # Nothing to commit
    if (
        not config.commit_all
        and config.skip.changelog
        and config.skip.bump
        and not to_add
    ):
        return

    described = list(result.updated_files)
    if not config.skip.changelog:
        described.append(config.infile)
    summary = " and ".join(described) if described else "nothing"
    if config.commit_all:
        summary += " and all staged files"
    checkpoint("committing %s", summary, silent=config.silent)

    if config.dry_run:
        return

    if to_add:
        git("add", *to_add, cwd=root)

    args = ["commit"]
    if config.no_verify:
        args.append("--no-verify")
    if config.sign:
        args.append("-S")
    if not config.commit_all:
        args.extend(to_add)
    args.extend(["-m", format_commit_message(message_format, result.version)])
    git(*args, cwd=root)

    run_lifecycle_script(config, "postcommit", cwd=root)


def tag_release(config: ReleaseConfig, version: str, root: Path) -> None:
    """Create the release tag and print how to publish it."""
    if config.skip.tag:
        return

    run_lifecycle_script(config, "pretag", cwd=root)

    tag = f"{config.tag_prefix}{version}"
    args = ["tag", "-s" if config.sign else "-a"]
    if config.tag_force:
        args.append("-f")
    message = format_commit_message(config.release_commit_message_format, version)
    args.extend([tag, "-m", message])

    checkpoint("tagging release %s", tag, silent=config.silent)
    if not config.dry_run:
        git(*args, cwd=root)

    branch = git("rev-parse", "--abbrev-ref", "HEAD", check=False, cwd=root) or "main"
    checkpoint(
        "Run `git push --follow-tags origin %s` to publish",
        branch,
        silent=config.silent,
        figure="ℹ",
    )

    run_lifecycle_script(config, "posttag", cwd=root)


def run_release(config: ReleaseConfig, root: Path | None = None) -> BumpResult:
    """Run the full release.

    Args:
        config: Release configuration.
        root: Project root. Defaults to the current working directory.

    Returns:
        The bump result (previous version, new version, rewritten files).
    """
    root = root or Path.cwd()

    # Commits since the last release, collected before the new tag exists
    commits: list[Commit] = []
    if not config.skip.changelog:
        commits = get_commits(latest_tag(config.tag_prefix, root), root)

    result = bump(config, root)
    logger.debug("Releasing %s (was %s)", result.version, result.previous)

    update_changelog(config, result.version, commits, root)
    commit_release(config, result, root)
    tag_release(config, result.version, root)
    return result
