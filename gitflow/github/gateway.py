"""Typed gateway to the hosting platform.

Workflows never talk to the GitHub API directly; they receive an object that
satisfies ``GitFlowGateway``. Production uses ``GhGateway`` (``gh`` CLI),
tests use an in-memory fake.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from gitflow.core.result import Result
from gitflow.services.errors import FlowError
from gitflow.services.model import (
    BranchPrefixes,
    BranchSet,
    PublishedRelease,
    PullRequest,
    RepoFile,
)

__all__ = ["GitFlowGateway"]


class GitFlowGateway(Protocol):
    def get_branches(self) -> Result[BranchSet, FlowError]:
        """Resolve current/target from the triggering event."""
        ...

    def get_prefixes(self) -> BranchPrefixes: ...

    def repository(self) -> str:
        """Repository slug, ``owner/name``."""
        ...

    def owner(self) -> str: ...

    def merge(self, head: str, base: str) -> Result[str, FlowError]:
        """Merge ``head`` into ``base`` and return the resulting commit sha.

        A conflicting merge is an error; nothing is retried.
        """
        ...

    def delete_branch(self, branch: str) -> Result[None, FlowError]: ...

    def create_tag(self, tag: str, sha: str) -> Result[None, FlowError]: ...

    def get_file(self, path: str, ref: str) -> Result[RepoFile, FlowError]:
        """Read a file; a missing file is ``NotFoundError``."""
        ...

    def update_file(
        self,
        path: str,
        content: str,
        message: str,
        branch: str,
        sha: str | None,
    ) -> Result[None, FlowError]:
        """Commit ``content`` to ``path``; ``sha`` is the blob being replaced
        (None creates the file)."""
        ...

    def list_pull_requests(self, head: str) -> Result[list[PullRequest], FlowError]:
        """Open or closed pull requests whose head matches ``head``."""
        ...

    def get_pull_request(self, number: int) -> Result[PullRequest, FlowError]: ...

    def create_release(
        self, tag: str, name: str, body: str
    ) -> Result[PublishedRelease, FlowError]: ...

    def upload_release_asset(self, tag: str, path: Path) -> Result[None, FlowError]: ...
