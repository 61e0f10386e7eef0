"""Updater registry: map a configured file to the updater that handles it.

Resolution order, first match wins:

1. The argument itself is an updater (callable read_version/write_version).
2. FileSpec.updater is a custom updater object, or a reference to load
   (a ``.py`` path relative to the project root, or a dotted module name).
3. FileSpec.type names a built-in updater.
4. The basename matches a known manifest name or pattern.
"""

from __future__ import annotations

import importlib
import importlib.util
import re
from collections.abc import Mapping
from pathlib import Path, PurePath
from types import MappingProxyType
from typing import Any

from .errors import InvalidUpdaterError, UnknownUpdaterTypeError, UnsupportedFileError
from .formats import (
    CsprojUpdater,
    CustomUpdater,
    GradleUpdater,
    JsonUpdater,
    MavenUpdater,
    OpenApiUpdater,
    PlainTextUpdater,
    PyprojectUpdater,
    PythonUpdater,
    Updater,
    YamlUpdater,
    is_updater,
)
from .models import FileSpec, ResolvedFile

JSON_BUMP_FILES = (
    "package.json",
    "bower.json",
    "manifest.json",
    "package-lock.json",
    "npm-shrinkwrap.json",
)
PLAIN_TEXT_BUMP_FILES = ("VERSION", "VERSION.txt", "version.txt")
PYTHON_BUMP_FILES = ("setup.py", "__version__.py", "_version.py")

UPDATERS_BY_TYPE: Mapping[str, Updater] = MappingProxyType(
    {
        updater.name: updater
        for updater in (
            JsonUpdater(),
            PlainTextUpdater(),
            MavenUpdater(),
            GradleUpdater(),
            CsprojUpdater(),
            YamlUpdater(),
            OpenApiUpdater(),
            PythonUpdater(),
            PyprojectUpdater(),
        )
    }
)

_OPENAPI_FILE = re.compile(r"openapi\.ya?ml")
_YAML_FILE = re.compile(r".+\.ya?ml")


def get_updater_by_type(type_name: str) -> Updater:
    """Look up a built-in updater by its type name.

    Raises:
        UnknownUpdaterTypeError: If type_name is not in UPDATERS_BY_TYPE.
    """
    try:
        return UPDATERS_BY_TYPE[type_name]
    except KeyError:
        raise UnknownUpdaterTypeError(type_name) from None


def get_updater_by_filename(filename: str) -> Updater:
    """Infer the updater from a file's basename.

    Raises:
        UnsupportedFileError: If no rule matches.
    """
    basename = PurePath(filename).name

    if basename in JSON_BUMP_FILES:
        return get_updater_by_type("json")
    if basename in PLAIN_TEXT_BUMP_FILES:
        return get_updater_by_type("plain-text")
    if basename == "pom.xml":
        return get_updater_by_type("maven")
    if basename.startswith("build.gradle"):
        return get_updater_by_type("gradle")
    if basename.endswith(".csproj"):
        return get_updater_by_type("csproj")
    if basename == "pyproject.toml":
        return get_updater_by_type("pyproject")
    if basename in PYTHON_BUMP_FILES:
        return get_updater_by_type("python")
    if _OPENAPI_FILE.search(basename):
        return get_updater_by_type("openapi")
    if _YAML_FILE.fullmatch(basename):
        return get_updater_by_type("yaml")

    raise UnsupportedFileError(filename)


def load_custom_updater(reference: str, root: Path) -> CustomUpdater:
    """Load a user updater module.

    References that look like paths ("./updaters/mix.py", "scripts/bump")
    are executed from the project root; anything else is imported as a
    dotted module name. The module must define read_version and
    write_version.

    Raises:
        InvalidUpdaterError: If the module cannot be loaded or lacks either
            function.
    """
    if reference.endswith(".py") or "/" in reference or "\\" in reference:
        path = (root / reference).resolve()
        if not path.suffix:
            path = path.with_suffix(".py")
        if not path.is_file():
            raise InvalidUpdaterError(
                f"Custom updater {reference!r} not found at {path}"
            )

        module_name = f"bumpkit_updater_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise InvalidUpdaterError(
                f"Custom updater {reference!r} is not a Python module"
            )
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise InvalidUpdaterError(
                f"Custom updater {reference!r} failed to load: {exc}"
            ) from exc
    else:
        try:
            module = importlib.import_module(reference)
        except ImportError as exc:
            raise InvalidUpdaterError(
                f"Unable to import custom updater {reference!r}: {exc}"
            ) from exc

    return CustomUpdater.from_object(module, source=reference)


def to_file_spec(arg: str | Mapping[str, Any] | FileSpec) -> FileSpec:
    """Normalize a configured file entry (path string or mapping) to a FileSpec."""
    if isinstance(arg, FileSpec):
        return arg
    if isinstance(arg, str):
        return FileSpec(filename=arg)
    return FileSpec.model_validate(arg)


def resolve_updater(arg: Any, root: Path | None = None) -> Updater:
    """Resolve a configured file entry to its updater.

    Args:
        arg: An updater object, a path string, a mapping with filename/type/
             updater keys, or a FileSpec.
        root: Directory that custom updater paths are relative to. Defaults
              to the current working directory.

    Raises:
        InvalidUpdaterError: Malformed custom updater.
        UnknownUpdaterTypeError: Unknown explicit type.
        UnsupportedFileError: No rule matches the filename.
    """
    if is_updater(arg):
        return arg if isinstance(arg, Updater) else CustomUpdater.from_object(arg)

    spec = to_file_spec(arg)
    if spec.updater is not None:
        if isinstance(spec.updater, Updater):
            return spec.updater
        if is_updater(spec.updater):
            return CustomUpdater.from_object(spec.updater, source=spec.filename)
        if isinstance(spec.updater, str):
            return load_custom_updater(spec.updater, root or Path.cwd())
        raise InvalidUpdaterError(
            "Updater must be a string path or an object with "
            "read_version and write_version methods"
        )
    if spec.type:
        return get_updater_by_type(spec.type)
    return get_updater_by_filename(spec.filename)


def resolve_file(
    arg: str | Mapping[str, Any] | FileSpec, root: Path | None = None
) -> ResolvedFile:
    """Resolve a configured file entry and bind it to its filename."""
    spec = to_file_spec(arg)
    return ResolvedFile(filename=spec.filename, updater=resolve_updater(spec, root))
