"""Exception hierarchy for bumpkit.

Configuration errors abort a run before any file is touched. Resolution and
read errors are classified by the bump orchestrator: fatal for the primary
package file, logged and skipped for secondary bump files.
"""

from __future__ import annotations


class BumpError(Exception):
    """Base class for all bumpkit errors."""


class ConfigurationError(BumpError):
    """An option or configuration file is invalid."""


class InvalidReleaseTypeError(ConfigurationError):
    """release_as is neither a release type nor a valid semver string."""

    def __init__(self, release_as: str) -> None:
        super().__init__(
            "releaseAs must be one of 'major', 'minor' or 'patch', "
            f"or a valid semver version (got {release_as!r})."
        )
        self.release_as = release_as


class ConflictingPrereleaseError(ConfigurationError):
    """release_as carries a prerelease identifier different from --prerelease."""

    def __init__(self, release_as: str, prerelease: str) -> None:
        super().__init__(
            "releaseAs and prerelease have conflicting prerelease identifiers "
            f"({release_as!r} vs {prerelease!r})."
        )
        self.release_as = release_as
        self.prerelease = prerelease


class InvalidUpdaterError(ConfigurationError):
    """A custom updater could not be loaded or lacks read/write functions."""


class UnknownUpdaterTypeError(ConfigurationError):
    """An explicit updater type is not in the type table."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unable to locate updater for provided type ({type_name}).")
        self.type_name = type_name


class UnsupportedFileError(BumpError):
    """No updater could be inferred from a filename."""

    def __init__(self, filename: str) -> None:
        super().__init__(
            f"Unsupported file ({filename}) provided for bumping.\n"
            " Please specify the updater `type` or use a custom `updater`."
        )
        self.filename = filename


class VersionReadError(BumpError):
    """A file exists but no trustworthy version could be read from it."""


class VersionFieldNotFoundError(VersionReadError):
    """The content parsed, but the version field is missing."""


class MalformedContentError(VersionReadError):
    """The content could not be parsed in its declared format."""


class UpdaterFailedError(VersionReadError):
    """A custom updater raised, or returned something other than text."""


class NoPackageFileError(BumpError):
    """No package file exists and the git tag fallback is disabled."""


class LifecycleScriptError(BumpError):
    """A configured lifecycle script exited with a non-zero status."""

    def __init__(self, hook: str, command: str, returncode: int) -> None:
        super().__init__(
            f"Lifecycle script {hook!r} ({command}) failed with exit code {returncode}."
        )
        self.hook = hook
        self.command = command
        self.returncode = returncode
