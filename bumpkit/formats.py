"""Format updaters: read and write the version string inside file content.

Each updater is a pair of pure functions over whole-file text. Writers only
touch the version field; indentation, quoting, comments and the file's line
ending convention stay as they were.

Regex updaters (Gradle, csproj, Python, plain text) cover formats whose
version line has a narrow, well-known shape. Structured formats (JSON, Maven,
YAML, pyproject.toml) are parsed so that look-alike fields elsewhere in the
document, such as a parent POM's version, are never touched.
"""

from __future__ import annotations

import io
import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any
from xml.parsers import expat
from xml.sax.saxutils import escape

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import (
    InvalidUpdaterError,
    MalformedContentError,
    UpdaterFailedError,
    VersionFieldNotFoundError,
    VersionReadError,
)
from .toml import dump_pyproject, get_version_table, parse_pyproject

CRLF = "\r\n"
LF = "\n"
DEFAULT_INDENT = "  "


def detect_newline(content: str) -> str:
    """Return the dominant line ending of content (LF on a tie or no newline)."""
    crlf = content.count(CRLF)
    lf = content.count(LF) - crlf
    return CRLF if crlf > lf else LF


def normalize_newlines(content: str, newline: str) -> str:
    """Rewrite every line ending in content to newline."""
    return re.sub(r"\r?\n", newline, content)


def detect_indent(content: str) -> str:
    """Return the leading whitespace of the first indented line.

    Falls back to two spaces for documents with no indentation at all.
    """
    for line in content.splitlines():
        stripped = line.lstrip(" \t")
        if stripped and stripped != line:
            return line[: len(line) - len(stripped)]
    return DEFAULT_INDENT


def _splice(text: str, match: re.Match[str], version: str) -> str:
    """Replace the "version" group of match in text."""
    return text[: match.start("version")] + version + text[match.end("version") :]


def is_updater(obj: object) -> bool:
    """Return True if obj exposes callable read_version and write_version."""
    return callable(getattr(obj, "read_version", None)) and callable(
        getattr(obj, "write_version", None)
    )


class Updater(ABC):
    """Reads and writes the version stored in one file format.

    Built-in updaters are stateless singletons (see bumpkit.registry). Both
    methods are pure: they take file content and return a value, never
    touching the filesystem.
    """

    name: str = ""

    @abstractmethod
    def read_version(self, content: str) -> str | None:
        """Return the version stored in content."""

    @abstractmethod
    def write_version(self, content: str, version: str) -> str:
        """Return content with its version replaced by version."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class JsonUpdater(Updater):
    """Top-level "version" key of a JSON manifest (package.json and friends)."""

    name = "json"

    @staticmethod
    def _load(content: str) -> dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise MalformedContentError(f"Invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedContentError("Expected a JSON object at the top level")
        return data

    def read_version(self, content: str) -> str:
        data = self._load(content)
        if "version" not in data:
            raise VersionFieldNotFoundError(
                'No top-level "version" key in JSON document'
            )
        return str(data["version"])

    def write_version(self, content: str, version: str) -> str:
        data = self._load(content)
        indent = detect_indent(content)
        newline = detect_newline(content)

        data["version"] = version
        # npm lockfiles v2+ repeat the root package version under packages[""]
        packages = data.get("packages")
        if isinstance(packages, dict) and isinstance(packages.get(""), dict):
            packages[""]["version"] = version

        text = json.dumps(data, indent=indent, ensure_ascii=False)
        return text.replace(LF, newline) + newline


class PlainTextUpdater(Updater):
    """The whole file is the version (VERSION, version.txt)."""

    name = "plain-text"

    def read_version(self, content: str) -> str:
        return content.strip()

    def write_version(self, content: str, version: str) -> str:
        return version


class MavenUpdater(Updater):
    """<project><version> of a Maven POM.

    The document is parsed with expat to find the byte span of the project's
    own <version> element; versions nested in <parent>, <dependencies> or
    plugins are never matched. Only that span is replaced, so the rest of
    the file, line endings included, is left byte-identical.
    """

    name = "maven"

    @staticmethod
    def _locate(content: str) -> tuple[int, int, str]:
        parser = expat.ParserCreate()
        path: list[str] = []
        span: list[int] = []
        text: list[str] = []

        def start(name: str, attrs: dict[str, str]) -> None:
            path.append(name.rpartition(":")[2])
            if path == ["project", "version"] and not span:
                span.append(parser.CurrentByteIndex)

        def end(name: str) -> None:
            if path == ["project", "version"] and len(span) == 1:
                span.append(parser.CurrentByteIndex)
            path.pop()

        def data(chunk: str) -> None:
            if path == ["project", "version"] and len(span) == 1:
                text.append(chunk)

        parser.StartElementHandler = start
        parser.EndElementHandler = end
        parser.CharacterDataHandler = data
        try:
            parser.Parse(content, True)
        except expat.ExpatError as exc:
            raise MalformedContentError(f"Invalid XML: {exc}") from exc

        if len(span) != 2:
            raise VersionFieldNotFoundError(
                "Failed to read the version field in your pom file - is it present?"
            )

        raw = content.encode("utf-8")
        open_end = raw.index(b">", span[0]) + 1
        if open_end > span[1]:
            raise VersionFieldNotFoundError(
                "The version element in your pom file is empty"
            )
        return open_end, span[1], "".join(text)

    def read_version(self, content: str) -> str:
        return self._locate(content)[2].strip()

    def write_version(self, content: str, version: str) -> str:
        start, end, _ = self._locate(content)
        raw = content.encode("utf-8")
        replacement = escape(version).encode("utf-8")
        return (raw[:start] + replacement + raw[end:]).decode("utf-8")


_GRADLE_VERSION = re.compile(
    r"""^[ \t]*version[ \t]*=?[ \t]*(?P<quote>["'])(?P<version>[^"'\r\n]*)(?P=quote)""",
    re.MULTILINE,
)


class GradleUpdater(Updater):
    """``version = "1.0.0"`` (Kotlin DSL) or ``version '1.0.0'`` (Groovy)."""

    name = "gradle"

    @staticmethod
    def _match(content: str) -> re.Match[str]:
        match = _GRADLE_VERSION.search(content)
        if match is None:
            raise VersionFieldNotFoundError(
                "Failed to read the version field in your gradle file - is it present?"
            )
        return match

    def read_version(self, content: str) -> str:
        return self._match(content).group("version")

    def write_version(self, content: str, version: str) -> str:
        match = self._match(content)
        return _splice(content, match, version)


_CSPROJ_VERSION = re.compile(r"<Version>(?P<version>.*?)</Version>")


class CsprojUpdater(Updater):
    """First <Version> element of a .NET project file."""

    name = "csproj"

    @staticmethod
    def _match(content: str) -> re.Match[str]:
        match = _CSPROJ_VERSION.search(content)
        if match is None:
            raise VersionFieldNotFoundError(
                "Failed to read the Version field in your csproj file - is it present?"
            )
        return match

    def read_version(self, content: str) -> str:
        return self._match(content).group("version")

    def write_version(self, content: str, version: str) -> str:
        match = self._match(content)
        return _splice(content, match, version)


_PLAIN_SCALAR = re.compile(r"[^\s,\]}#]+")


def _yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 4096
    return yaml


def _is_plain_token(content: str, line: int, column: int, value: Any) -> bool:
    """Return True if (line, column) starts a bare or quoted scalar token.

    Null values, anchors, aliases, tags and block scalars are not.
    """
    if value is None or getattr(getattr(value, "anchor", None), "value", None):
        return False
    lines = content.splitlines()
    if line >= len(lines) or column >= len(lines[line]):
        return False
    return lines[line][column] not in "&*!|>\r\n#"


def _replace_scalar(content: str, line: int, column: int, value: str) -> str:
    """Replace the scalar token starting at (line, column), keeping its quotes."""
    lines = content.splitlines(keepends=True)
    text = lines[line]
    quote = text[column]
    if quote in "'\"":
        end = text.index(quote, column + 1) + 1
        token = f"{quote}{value}{quote}"
    else:
        match = _PLAIN_SCALAR.match(text, column)
        end = match.end() if match else column
        token = value
    lines[line] = text[:column] + token + text[end:]
    return "".join(lines)


class YamlUpdater(Updater):
    """Top-level ``version`` of a YAML document (pubspec.yaml, Chart.yaml, ...).

    ruamel.yaml parses the document in round-trip mode and reports where the
    version scalar sits, and only that token is rewritten. A missing key, or
    a value that is not a bare or quoted scalar (null, anchored, aliased,
    tagged), is set on the document and re-dumped by ruamel.yaml, which
    keeps comments.
    """

    name = "yaml"

    @staticmethod
    def _load(content: str) -> Any:
        try:
            return _yaml().load(content)
        except YAMLError as exc:
            raise MalformedContentError(f"Invalid YAML: {exc}") from exc

    def _container(self, data: Any) -> Any:
        if not isinstance(data, dict):
            raise VersionFieldNotFoundError("Expected a YAML mapping at the top level")
        return data

    def read_version(self, content: str) -> str:
        container = self._container(self._load(content))
        if "version" not in container:
            raise VersionFieldNotFoundError("No version field in YAML document")
        return str(container["version"])

    def write_version(self, content: str, version: str) -> str:
        data = self._load(content)
        container = self._container(data)
        if "version" in container:
            line, column = container.lc.value("version")
            if _is_plain_token(content, line, column, container["version"]):
                return _replace_scalar(content, line, column, version)

        container["version"] = version
        stream = io.StringIO()
        _yaml().dump(data, stream)
        return normalize_newlines(stream.getvalue(), detect_newline(content))


class OpenApiUpdater(YamlUpdater):
    """``info.version`` of an OpenAPI document."""

    name = "openapi"

    def _container(self, data: Any) -> Any:
        info = data.get("info") if isinstance(data, dict) else None
        if not isinstance(info, dict):
            raise VersionFieldNotFoundError("No info mapping in OpenAPI document")
        return info


_PYTHON_VERSION = re.compile(
    r"""version[_"' ]*=\s*(?P<quote>["'])(?P<version>.*?)(?P=quote)""", re.IGNORECASE
)


def _find_python_version(lines: list[str]) -> tuple[int, re.Match[str]] | None:
    for index, line in enumerate(lines):
        match = _PYTHON_VERSION.search(line)
        if match is not None:
            return index, match
    return None


class PythonUpdater(Updater):
    """First ``version = "..."`` style line of a Python file or setup script.

    Matches ``version="1.0.0"``, ``version = '1.0.0'`` and
    ``__version__ = "1.0.0"``, case-insensitively. Only the quoted value on
    the first matching line changes.
    """

    name = "python"

    def read_version(self, content: str) -> str | None:
        found = _find_python_version(content.split(LF))
        return found[1].group("version") if found else None

    def write_version(self, content: str, version: str) -> str:
        lines = content.split(LF)
        found = _find_python_version(lines)
        if found is None:
            raise VersionFieldNotFoundError(
                "No version assignment found in Python file"
            )
        index, match = found
        lines[index] = _splice(lines[index], match, version)
        return LF.join(lines)


class PyprojectUpdater(Updater):
    """[project].version (or [tool.poetry].version) of pyproject.toml."""

    name = "pyproject"

    def read_version(self, content: str) -> str:
        return str(get_version_table(parse_pyproject(content))["version"])

    def write_version(self, content: str, version: str) -> str:
        doc = parse_pyproject(content)
        get_version_table(doc)["version"] = version
        return dump_pyproject(doc)


class CustomUpdater(Updater):
    """A user-supplied pair of read/write functions."""

    name = "custom"

    def __init__(
        self,
        read_version: Callable[[str], str | None],
        write_version: Callable[[str, str], str],
        source: str = "",
    ) -> None:
        self._read = read_version
        self._write = write_version
        self.source = source

    @classmethod
    def from_object(cls, obj: Any, source: str = "") -> CustomUpdater:
        """Wrap any object (module, instance, namespace) exposing the two functions."""
        if not is_updater(obj):
            raise InvalidUpdaterError(
                f"Updater {source or obj!r} must provide callable "
                "read_version(contents) and write_version(contents, version)"
            )
        return cls(obj.read_version, obj.write_version, source)

    def read_version(self, content: str) -> str | None:
        try:
            return self._read(content)
        except VersionReadError:
            raise
        except Exception as exc:
            raise UpdaterFailedError(
                f"Custom updater {self.source!r} failed to read the version: {exc}"
            ) from exc

    def write_version(self, content: str, version: str) -> str:
        try:
            result = self._write(content, version)
        except VersionReadError:
            raise
        except Exception as exc:
            raise UpdaterFailedError(
                f"Custom updater {self.source!r} failed to write the version: {exc}"
            ) from exc
        if not isinstance(result, str):
            raise UpdaterFailedError(
                f"Custom updater {self.source!r} returned "
                f"{type(result).__name__} instead of the new file content"
            )
        return result

    def __repr__(self) -> str:
        return f"<CustomUpdater {self.source!r}>"
