"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git and
lifecycle scripts, plus the operator-facing progress output.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click


def git(*args: str, check: bool = True, cwd: Path | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "--list").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup
               in a repository without commits).
        cwd: Directory to run git in. Defaults to the current directory.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=check, cwd=cwd
    )
    return result.stdout.strip()


def git_succeeds(*args: str, cwd: Path | None = None) -> bool:
    """Run a git command for its exit status alone (e.g., "check-ignore")."""
    result = subprocess.run(["git", *args], capture_output=True, text=True, cwd=cwd)
    return result.returncode == 0


def run_script(
    command: str, cwd: Path | None = None
) -> subprocess.CompletedProcess[str]:
    """Run a lifecycle script through the shell, capturing its output.

    The caller inspects returncode; a failing script does not raise here.
    """
    return subprocess.run(command, shell=True, capture_output=True, text=True, cwd=cwd)


def checkpoint(
    msg: str, *args: object, silent: bool = False, figure: str = "✔"
) -> None:
    """Print one progress line.

    For example "✔ bumping version in package.json from 1.0.0 to 1.1.0".

    ``msg`` is a %-style format string filled with ``args``. Nothing is
    printed when ``silent`` is set.
    """
    if silent:
        return
    click.echo(f"{figure} {msg % args if args else msg}")
