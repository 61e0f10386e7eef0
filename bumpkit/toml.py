"""TOML reading utilities.

Uses tomlkit to preserve formatting and comments when modifying pyproject.toml
files. This is important for maintaining readable, diff-friendly files.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import MalformedContentError, VersionFieldNotFoundError


def parse_pyproject(content: str) -> tomlkit.TOMLDocument:
    """Parse pyproject.toml text into a format-preserving TOMLDocument.

    Raises:
        MalformedContentError: If the text is not valid TOML.
    """
    try:
        return tomlkit.parse(content)
    except TOMLKitError as exc:
        raise MalformedContentError(f"Invalid TOML: {exc}") from exc


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return parse_pyproject(path.read_text(encoding="utf-8"))


def dump_pyproject(doc: tomlkit.TOMLDocument) -> str:
    """Serialize a TOMLDocument, preserving original formatting."""
    return tomlkit.dumps(doc)


def get_version_table(doc: tomlkit.TOMLDocument) -> MutableMapping[str, Any]:
    """Return the table that carries the project version.

    PEP 621 projects keep it in [project]; Poetry projects in [tool.poetry].

    Raises:
        VersionFieldNotFoundError: If neither table has a version key.
    """
    project = doc.get("project")
    if isinstance(project, MutableMapping) and "version" in project:
        return project

    poetry = doc.get("tool", {}).get("poetry")
    if isinstance(poetry, MutableMapping) and "version" in poetry:
        return poetry

    raise VersionFieldNotFoundError(
        "No version in [project] or [tool.poetry] of pyproject.toml - is it dynamic?"
    )


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract the project version as a plain string."""
    return str(get_version_table(doc)["version"])


def get_tool_config(doc: tomlkit.TOMLDocument, tool: str) -> dict[str, Any] | None:
    """Return [tool.<tool>] as plain Python data, or None if it is absent."""
    table = doc.get("tool", {}).get(tool)
    if table is None:
        return None
    return table.unwrap() if hasattr(table, "unwrap") else dict(table)
