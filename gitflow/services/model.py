from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


ArtifactKind = Literal["platform-archive", "standard-package"]


@dataclass(frozen=True, slots=True)
class BranchSet:
    """Branch names resolved once from the triggering event."""

    current: str
    target: str
    main: str
    development: str


@dataclass(frozen=True, slots=True)
class BranchPrefixes:
    feature: str
    bugfix: str
    hotfix: str
    release: str
    support: str
    tag: str


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    path: Path
    kind: ArtifactKind

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class PullRequestMetadata:
    """Description derived from the release pull request."""

    body: str
    url: str


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    title: str
    body: str
    url: str
    changed_files: int | None = None
    commits: int | None = None
    head: str | None = None  # head ref name
    base: str | None = None


@dataclass(frozen=True, slots=True)
class RepoFile:
    path: str
    content: str
    sha: str  # blob sha, required to update the file


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    id: int
    url: str


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Everything a completed release run produced."""

    sha: str  # commit on the main branch
    tag: str
    artifact: ReleaseArtifact
    release: PublishedRelease
