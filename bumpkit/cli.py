"""CLI entry point for bumpkit."""

from __future__ import annotations

import logging
import subprocess
from typing import Any

import click
from click.core import ParameterSource

from bumpkit.config import load_config
from bumpkit.errors import BumpError
from bumpkit.pipeline import run_release

# CLI option name -> ReleaseConfig field
CONFIG_OPTIONS = {
    "release_as": "release_as",
    "prerelease": "prerelease",
    "first_release": "first_release",
    "tag_prefix": "tag_prefix",
    "infile": "infile",
    "header": "header",
    "message": "release_commit_message_format",
    "sign": "sign",
    "no_verify": "no_verify",
    "commit_all": "commit_all",
    "tag_force": "tag_force",
    "dry_run": "dry_run",
    "silent": "silent",
    "git_tag_fallback": "git_tag_fallback",
}
SKIP_OPTIONS = ("skip_bump", "skip_changelog", "skip_commit", "skip_tag")


def _given(ctx: click.Context, name: str) -> bool:
    source = ctx.get_parameter_source(name)
    return source in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)


def collect_overrides(
    ctx: click.Context, options: dict[str, Any], skip: dict[str, bool]
) -> dict[str, Any]:
    """Map the options given on the command line to ReleaseConfig fields."""
    overrides = {
        field: options[name]
        for name, field in CONFIG_OPTIONS.items()
        if _given(ctx, name)
    }
    skipped = {
        name.removeprefix("skip_"): True for name in SKIP_OPTIONS if options[name]
    }
    if skipped:
        overrides["skip"] = {**skip, **skipped}
    return overrides


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="bumpkit")
@click.option(
    "-r",
    "--release-as",
    help="Release as a type (major, minor, patch) or an exact version.",
)
@click.option(
    "-p",
    "--prerelease",
    is_flag=False,
    flag_value="",
    default=None,
    help="Make a prerelease, optionally with an identifier (e.g. alpha).",
)
@click.option(
    "-f",
    "--first-release",
    is_flag=True,
    help="First release: keep the current version.",
)
@click.option("-t", "--tag-prefix", help='Prefix of release tags (default "v").')
@click.option("-i", "--infile", help="Changelog file (default CHANGELOG.md).")
@click.option("--header", help="Changelog header.")
@click.option(
    "-m", "--message", help="Commit message; {{currentTag}} is replaced by the version."
)
@click.option("-s", "--sign", is_flag=True, help="GPG-sign the release commit and tag.")
@click.option("-n", "--no-verify", is_flag=True, help="Bypass git commit hooks.")
@click.option("-a", "--commit-all", is_flag=True, help="Commit all staged changes too.")
@click.option("--tag-force", is_flag=True, help="Replace the tag if it exists.")
@click.option(
    "--dry-run", is_flag=True, help="Show what would happen without writing anything."
)
@click.option("--silent", is_flag=True, help="Suppress progress output.")
@click.option(
    "--git-tag-fallback/--no-git-tag-fallback",
    default=True,
    help="Read the version from git tags when no package file exists.",
)
@click.option("--skip-bump", is_flag=True, help="Do not bump the version.")
@click.option("--skip-changelog", is_flag=True, help="Do not write the changelog.")
@click.option("--skip-commit", is_flag=True, help="Do not commit.")
@click.option("--skip-tag", is_flag=True, help="Do not tag.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Configuration file (default: .versionrc, .versionrc.json or pyproject.toml).",
)
@click.option("--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
def cli(
    ctx: click.Context, config_file: str | None, verbose: bool, **options: Any
) -> None:
    """Bump versions, write the changelog, commit and tag a release."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config_file)
        overrides = collect_overrides(ctx, options, config.skip.model_dump())
        if overrides:
            config = config.with_overrides(**overrides)
        run_release(config)
    except BumpError as exc:
        raise click.ClickException(str(exc)) from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip()
        raise click.ClickException(f"{exc}\n{detail}" if detail else str(exc)) from exc
