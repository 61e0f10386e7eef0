"""Changelog generation.

A new release section is placed between the header and the previous
releases; any front matter before the "# Changelog" title is kept on top.
"""

from __future__ import annotations

import datetime
import re
from pathlib import Path

import click

from .commits import Commit
from .config import ReleaseConfig
from .hooks import run_lifecycle_script
from .shell import checkpoint

CHANGELOG_TITLE = "# Changelog"
START_OF_LAST_RELEASE_PATTERN = re.compile(
    r"(^#+ \[?[0-9]+\.[0-9]+\.[0-9]+|<a name=)", re.MULTILINE
)

_SECTIONS = (
    ("⚠ BREAKING CHANGES", lambda commit: commit.breaking),
    ("Features", lambda commit: commit.type == "feat"),
    ("Bug Fixes", lambda commit: commit.type == "fix"),
)


def extract_front_matter(content: str) -> str:
    """Return the text preceding the changelog title, if the title is not first."""
    index = content.find(CHANGELOG_TITLE)
    return content[:index] if index > 0 else ""


def extract_changelog_body(content: str) -> str:
    """Return content from the first release section onward.

    Content without any release section is returned whole.
    """
    match = START_OF_LAST_RELEASE_PATTERN.search(content)
    return content[match.start() :] if match else content


def _entry(commit: Commit) -> str:
    scope = f"**{commit.scope}:** " if commit.scope else ""
    return f"* {scope}{commit.subject} ({commit.hash[:7]})"


def render_release(
    version: str, commits: list[Commit], date: datetime.date | None = None
) -> str:
    """Render the Markdown section for one release."""
    date = date or datetime.date.today()
    lines = [f"## {version} ({date.isoformat()})", ""]
    for title, selected in _SECTIONS:
        entries = [_entry(commit) for commit in commits if selected(commit)]
        if entries:
            lines += [f"### {title}", "", *entries, ""]
    return "\n".join(lines) + "\n"


def splice_changelog(content: str, header: str, release: str) -> str:
    """Insert a rendered release into existing changelog content."""
    front_matter = extract_front_matter(content)
    body = extract_changelog_body(content)
    return front_matter + header + "\n" + re.sub(r"\n+\Z", "\n", release + body)


def update_changelog(
    config: ReleaseConfig, version: str, commits: list[Commit], root: Path | None = None
) -> None:
    """Write the release section for version into the configured changelog."""
    if config.skip.changelog:
        return

    root = root or Path.cwd()
    run_lifecycle_script(config, "prechangelog", cwd=root)

    path = root / config.infile
    if not path.exists():
        checkpoint("created %s", config.infile, silent=config.silent)
        if not config.dry_run:
            path.write_bytes(b"\n")

    release = render_release(version, commits)
    checkpoint("outputting changes to %s", config.infile, silent=config.silent)
    if config.dry_run:
        if not config.silent:
            click.echo(f"\n---\n{release.strip()}\n---\n")
    else:
        content = path.read_bytes().decode("utf-8")
        content = splice_changelog(content, config.header, release)
        path.write_bytes(content.encode("utf-8"))

    run_lifecycle_script(config, "postchangelog", cwd=root)
