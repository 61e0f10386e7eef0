"""Lifecycle scripts: user shell commands run around each release step."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import ReleaseConfig
from .errors import LifecycleScriptError
from .shell import checkpoint, run_script

logger = logging.getLogger(__name__)

HOOKS = (
    "prerelease",
    "prebump",
    "postbump",
    "prechangelog",
    "postchangelog",
    "precommit",
    "postcommit",
    "pretag",
    "posttag",
)


def run_lifecycle_script(
    config: ReleaseConfig, hook: str, cwd: Path | None = None
) -> str | None:
    """Run the script configured for hook and return its stdout.

    Returns None when no script is configured or in dry-run mode.

    Raises:
        LifecycleScriptError: If the script exits non-zero.
    """
    command = config.scripts.get(hook)
    if not command:
        return None

    checkpoint(
        'Running lifecycle script "%s"', hook, silent=config.silent, figure="ℹ"
    )
    checkpoint('- execute command: "%s"', command, silent=config.silent, figure="ℹ")
    if config.dry_run:
        return None

    result = run_script(command, cwd=cwd)
    if result.stderr:
        logger.warning("%s: %s", hook, result.stderr.strip())
    if result.returncode != 0:
        raise LifecycleScriptError(hook, command, result.returncode)
    return result.stdout
