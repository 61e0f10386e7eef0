"""Data models for bumpkit.

These Pydantic models represent the values that flow through a release run:
the configured files, the release signal, and the result of the bump step.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ReleaseType = Literal["major", "minor", "patch"]


class FileSpec(BaseModel):
    """One configured file to read a version from or write a version into.

    Attributes:
        filename: Path relative to the project root.
        type: Explicit updater type (e.g. "json", "maven"). Inferred from the
              filename when omitted.
        updater: A custom updater: either a reference to load (a ``.py`` file
                 path or a dotted module name) or an object exposing callable
                 ``read_version``/``write_version`` members.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: str
    type: str | None = None
    updater: Any = None


class ResolvedFile(BaseModel):
    """A FileSpec bound to the updater that handles it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: str
    updater: Any


class ReleaseSignal(BaseModel):
    """What kind of release to cut.

    Exactly one of ``release_type`` or ``version`` is set. ``explicit`` is True
    when the signal came from the user (``--release-as``) rather than from the
    commit history; only recommended major bumps are demoted before 1.0.0.
    """

    release_type: ReleaseType | None = None
    version: str | None = None
    explicit: bool = False

    @model_validator(mode="after")
    def _exactly_one(self) -> ReleaseSignal:
        if (self.release_type is None) == (self.version is None):
            raise ValueError(
                "ReleaseSignal needs exactly one of release_type or version"
            )
        return self


class BumpResult(BaseModel):
    """Outcome of the bump step.

    Attributes:
        previous: The version read from the primary package file (or git tags).
        version: The resolved next version.
        updated_files: Files whose version was rewritten, in configured order.
                       These are what the commit step stages.
    """

    previous: str
    version: str
    updated_files: list[str] = Field(default_factory=list)
