"""Conventional commit parsing and the default release recommendation.

Commits since the latest release tag decide the release type: any breaking
change gives "major", any feature "minor", anything else "patch".
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel

from .models import ReleaseSignal
from .shell import git
from .tags import latest_tag

logger = logging.getLogger(__name__)

_HEADER = re.compile(
    r"^(?P<type>\w+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*(?P<subject>.+)$"
)
_BREAKING_NOTE = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)

# git log --format separators: unit separator between hash and body,
# record separator after each commit
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"


class Commit(BaseModel):
    """One commit, classified by its conventional commit header.

    Attributes:
        hash: Full commit hash.
        subject: Header description, or the whole header for
                 non-conventional commits.
        type: Conventional type ("feat", "fix", ...); None when the header
              does not follow the convention.
        scope: Optional scope from "type(scope): subject".
        breaking: "!" in the header or a BREAKING CHANGE footer.
    """

    hash: str
    subject: str
    type: str | None = None
    scope: str | None = None
    breaking: bool = False


def parse_commit(commit_hash: str, message: str) -> Commit:
    """Classify a raw commit message."""
    message = message.strip()
    header = message.split("\n", 1)[0].strip()
    breaking = bool(_BREAKING_NOTE.search(message))

    match = _HEADER.match(header)
    if match is None:
        return Commit(hash=commit_hash, subject=header, breaking=breaking)

    return Commit(
        hash=commit_hash,
        subject=match.group("subject").strip(),
        type=match.group("type").lower(),
        scope=match.group("scope") or None,
        breaking=breaking or bool(match.group("breaking")),
    )


def get_commits(since: str | None = None, cwd: Path | None = None) -> list[Commit]:
    """Return commits reachable from HEAD but not from ``since``, newest first."""
    revision = f"{since}..HEAD" if since else "HEAD"
    output = git(
        "log",
        f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}",
        revision,
        check=False,
        cwd=cwd,
    )

    commits = []
    for record in output.split(_RECORD_SEP):
        commit_hash, sep, message = record.strip().partition(_FIELD_SEP)
        if not sep:
            continue
        commits.append(parse_commit(commit_hash, message))
    return commits


def classify(commits: list[Commit]) -> str:
    """Return the release type a list of commits calls for."""
    if any(commit.breaking for commit in commits):
        return "major"
    if any(commit.type == "feat" for commit in commits):
        return "minor"
    return "patch"


def recommend_release_type(
    tag_prefix: str = "v", cwd: Path | None = None
) -> ReleaseSignal:
    """Recommend a release from the commits since the latest release tag."""
    since = latest_tag(tag_prefix, cwd)
    commits = get_commits(since, cwd)
    release_type = classify(commits)
    logger.debug(
        "%d commit(s) since %s recommend a %s release",
        len(commits),
        since or "the start",
        release_type,
    )
    return ReleaseSignal(release_type=release_type)
