"""Merge-down workflows for feature, bugfix and hotfix branches.

Each workflow pairs a pure predicate over the event's branches with a handler
that performs the merges and returns the resulting commit sha.
"""

from __future__ import annotations

from gitflow.core.result import Err, Ok, Result
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.services.errors import FlowError
from gitflow.services.model import BranchPrefixes, BranchSet


def has_prefix(branch: str, prefix: str) -> bool:
    # Containment, not startswith: "user/feature/x" counts as a feature branch.
    # An unconfigured (empty) prefix never matches.
    return bool(prefix) and prefix in branch


def targets_development(branches: BranchSet, quality: str) -> bool:
    return branches.target in (branches.development, quality)


class _MergeDown:
    name = ""

    def __init__(
        self, gateway: GitFlowGateway, console: ConsoleProtocol, *, quality: str = "quality"
    ) -> None:
        self._gateway = gateway
        self._console = console
        self._quality = quality

    def _merge_and_delete(self, branches: BranchSet) -> Result[str, FlowError]:
        self._console.print(f"merge {branches.current} -> {branches.development}", Style.DIM)
        sha = self._gateway.merge(branches.current, branches.development)
        if isinstance(sha, Err):
            return sha

        deleted = self._gateway.delete_branch(branches.current)
        if isinstance(deleted, Err):
            return deleted
        self._console.print(f"deleted {branches.current}", Style.DIM)
        return Ok(sha.value)


class FeatureWorkflow(_MergeDown):
    """feature/* -> development (or quality): merge into development, delete."""

    name = "feature"

    def test(self, branches: BranchSet, prefixes: BranchPrefixes) -> bool:
        return has_prefix(branches.current, prefixes.feature) and targets_development(
            branches, self._quality
        )

    def handle(self, branches: BranchSet, prefixes: BranchPrefixes) -> Result[str, FlowError]:
        return self._merge_and_delete(branches)


class BugfixWorkflow(_MergeDown):
    """bugfix/* -> development (or quality): merge into development, delete."""

    name = "bugfix"

    def test(self, branches: BranchSet, prefixes: BranchPrefixes) -> bool:
        return has_prefix(branches.current, prefixes.bugfix) and targets_development(
            branches, self._quality
        )

    def handle(self, branches: BranchSet, prefixes: BranchPrefixes) -> Result[str, FlowError]:
        return self._merge_and_delete(branches)


class HotfixWorkflow(_MergeDown):
    """hotfix/* -> main: merge into main, then development, then delete.

    Returns the commit on main.
    """

    name = "hotfix"

    def test(self, branches: BranchSet, prefixes: BranchPrefixes) -> bool:
        return has_prefix(branches.current, prefixes.hotfix) and branches.target == branches.main

    def handle(self, branches: BranchSet, prefixes: BranchPrefixes) -> Result[str, FlowError]:
        self._console.print(f"merge {branches.current} -> {branches.main}", Style.DIM)
        sha = self._gateway.merge(branches.current, branches.main)
        if isinstance(sha, Err):
            return sha

        self._console.print(f"merge {branches.current} -> {branches.development}", Style.DIM)
        dev = self._gateway.merge(branches.current, branches.development)
        if isinstance(dev, Err):
            return dev

        deleted = self._gateway.delete_branch(branches.current)
        if isinstance(deleted, Err):
            return deleted
        self._console.print(f"deleted {branches.current}", Style.DIM)
        return Ok(sha.value)
