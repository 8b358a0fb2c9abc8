from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


BuildStage = Literal["install", "build", "artifact", "output", "package"]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Branch name does not follow the release-branch pattern."""

    branch: str
    expected: str


@dataclass(frozen=True, slots=True)
class FormatError:
    """A file could not be parsed in the expected structured format."""

    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class NotFoundError:
    """A referenced file, pull request, or build directory is absent."""

    what: str
    name: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class BuildError:
    stage: BuildStage
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ChangelogError:
    message: str


@dataclass(frozen=True, slots=True)
class PublishError:
    """Release creation or asset upload failed against the hosting API."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class GatewayError:
    """A hosting API call (merge, tag, delete, file update) failed."""

    operation: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class NoMatchingWorkflow:
    current: str
    target: str


FlowError = (
    ValidationError
    | FormatError
    | NotFoundError
    | BuildError
    | ChangelogError
    | PublishError
    | GatewayError
    | NoMatchingWorkflow
)
