"""Configuration discovery and validation.

A release run is configured by, in increasing precedence:

1. The defaults on ReleaseConfig.
2. The first configuration file found walking up from the working
   directory: ``.versionrc``, ``.versionrc.json`` or a pyproject.toml with a
   ``[tool.bumpkit]`` table.
3. Command line options (see ReleaseConfig.with_overrides).

Keys may be written camelCase (``packageFiles``), snake_case or kebab-case.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError
from .models import FileSpec
from .registry import JSON_BUMP_FILES, to_file_spec
from .toml import get_tool_config, load_pyproject

logger = logging.getLogger(__name__)

CONFIGURATION_FILES = (".versionrc", ".versionrc.json")
PYPROJECT = "pyproject.toml"
TOOL_NAME = "bumpkit"

DEFAULT_PACKAGE_FILES = ("package.json", "bower.json", "manifest.json")
DEFAULT_HEADER = (
    "# Changelog\n\n"
    "All notable changes to this project will be documented in this file. "
    "See [Conventional Commits](https://conventionalcommits.org) "
    "for commit guidelines.\n"
)
DEFAULT_COMMIT_MESSAGE = "chore(release): {{currentTag}}"


class SkipConfig(BaseModel):
    """Steps of the release run to leave out.

    Attributes:
        bump: Keep the current version and touch no files.
        changelog: Do not write the changelog.
        commit: Do not create the release commit.
        tag: Do not create the release tag.
    """

    model_config = ConfigDict(extra="forbid")

    bump: bool = False
    changelog: bool = False
    commit: bool = False
    tag: bool = False


class ReleaseConfig(BaseModel):
    """Validated options for one release run.

    Attributes:
        package_files: Files the current version is read from; the first one
                       present on disk is authoritative.
        bump_files: Files the new version is written into.
        release_as: Exact version or release type overriding the recommendation.
        prerelease: Prerelease identifier; "" for an unnamed prerelease, None
                    for a regular release.
        first_release: Keep the current version (seeding the first tag).
        tag_prefix: Prefix of release tags ("v" gives "v1.2.3").
        infile: Changelog path.
        header: Text written above the release sections of the changelog.
        release_commit_message_format: Commit/tag message; "{{currentTag}}" is
                                       replaced by the new version.
        sign: GPG-sign the commit and tag.
        no_verify: Bypass git commit hooks.
        commit_all: Commit every staged change, not just the release files.
        tag_force: Replace an existing tag.
        dry_run: Report what would happen without writing anything.
        silent: Suppress progress output.
        git_tag_fallback: Read the current version from git tags when no
                          package file exists.
        scripts: Lifecycle hook name to shell command.
        skip: Steps to leave out.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    package_files: list[FileSpec] = Field(
        default_factory=lambda: [
            FileSpec(filename=name) for name in DEFAULT_PACKAGE_FILES
        ]
    )
    bump_files: list[FileSpec] = Field(
        default_factory=lambda: [FileSpec(filename=name) for name in JSON_BUMP_FILES]
    )
    release_as: str | None = None
    prerelease: str | None = None
    first_release: bool = False
    tag_prefix: str = "v"
    infile: str = "CHANGELOG.md"
    header: str = DEFAULT_HEADER
    release_commit_message_format: str = DEFAULT_COMMIT_MESSAGE
    sign: bool = False
    no_verify: bool = False
    commit_all: bool = False
    tag_force: bool = False
    dry_run: bool = False
    silent: bool = False
    git_tag_fallback: bool = True
    scripts: dict[str, str] = Field(default_factory=dict)
    skip: SkipConfig = Field(default_factory=SkipConfig)

    @field_validator("package_files", "bump_files", mode="before")
    @classmethod
    def _coerce_file_specs(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [
                to_file_spec(item) if isinstance(item, str) else item
                for item in value
            ]
        return value

    @field_validator("prerelease", mode="before")
    @classmethod
    def _coerce_prerelease(cls, value: Any) -> Any:
        if value is True:
            return ""
        if value is False:
            return None
        return value

    @property
    def effective_bump_files(self) -> list[FileSpec]:
        """bump_files followed by any package_files entry not already listed."""
        files = list(self.bump_files)
        seen = {spec.filename for spec in files}
        for spec in self.package_files:
            if spec.filename not in seen:
                files.append(spec)
                seen.add(spec.filename)
        return files

    def with_overrides(self, **overrides: Any) -> ReleaseConfig:
        """Return a copy with overrides applied and re-validated.

        Raises:
            ConfigurationError: If an override does not validate.
        """
        data = self.model_dump()
        data.update(overrides)
        return validate_config(data)


def validate_config(data: dict[str, Any], source: Path | None = None) -> ReleaseConfig:
    """Validate raw configuration data into a ReleaseConfig.

    Raises:
        ConfigurationError: If the data is not a valid configuration.
    """
    where = f" in {source}" if source else ""
    try:
        return ReleaseConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration{where}:\n{exc}") from exc


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {key.replace("-", "_"): value for key, value in data.items()}


def read_config_file(path: Path) -> dict[str, Any]:
    """Read raw configuration from a .versionrc style JSON file or pyproject.toml.

    Raises:
        ConfigurationError: If the file is not valid JSON, or not an object.
    """
    if path.name == PYPROJECT:
        data: Any = get_tool_config(load_pyproject(path), TOOL_NAME) or {}
    else:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"[{path}] Invalid configuration provided. "
            f"Expected an object but found {type(data).__name__}."
        )
    return _normalize_keys(data)


def find_config_file(cwd: Path) -> Path | None:
    """Walk up from cwd and return the first configuration file found."""
    for directory in (cwd, *cwd.parents):
        for name in CONFIGURATION_FILES:
            candidate = directory / name
            if candidate.is_file():
                return candidate

        pyproject = directory / PYPROJECT
        if not pyproject.is_file():
            continue
        if get_tool_config(load_pyproject(pyproject), TOOL_NAME) is not None:
            return pyproject
    return None


def load_config(
    config_file: str | Path | None = None, cwd: Path | None = None
) -> ReleaseConfig:
    """Load the configuration for a release run.

    Args:
        config_file: Explicit configuration file. When omitted, one is
                     searched for from cwd upwards; none found means defaults.
        cwd: Directory to search from. Defaults to the current directory.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    if config_file is not None:
        path: Path | None = Path(config_file)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file {config_file} not found")
    else:
        path = find_config_file((cwd or Path.cwd()).resolve())

    if path is None:
        logger.debug("No configuration file found, using defaults")
        return ReleaseConfig()

    logger.debug("Loading configuration from %s", path)
    return validate_config(read_config_file(path), source=path)
