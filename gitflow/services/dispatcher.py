"""Workflow selection.

Predicates are not mutually exclusive (a branch named ``release/bugfix/1.0.0``
contains two prefixes), so the registration order is policy: release first,
then hotfix, bugfix, feature. The first workflow whose predicate holds is the
only one that runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from gitflow.core.result import Err, Ok, Result
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.services.errors import FlowError, NoMatchingWorkflow
from gitflow.services.model import BranchPrefixes, BranchSet
from gitflow.services.release import ReleaseWorkflow
from gitflow.services.workflows import BugfixWorkflow, FeatureWorkflow, HotfixWorkflow

DEFAULT_ORDER: tuple[str, ...] = ("release", "hotfix", "bugfix", "feature")


class Workflow(Protocol):
    name: str

    def test(self, branches: BranchSet, prefixes: BranchPrefixes) -> bool: ...

    def handle(self, branches: BranchSet, prefixes: BranchPrefixes) -> Result[str, FlowError]: ...


def default_workflows(
    gateway: GitFlowGateway,
    console: ConsoleProtocol,
    *,
    project_root: Path,
    quality: str,
) -> tuple[Workflow, ...]:
    """The four standard workflows in ``DEFAULT_ORDER``."""
    by_name: dict[str, Workflow] = {
        "release": ReleaseWorkflow(gateway, console, project_root=project_root),
        "hotfix": HotfixWorkflow(gateway, console, quality=quality),
        "bugfix": BugfixWorkflow(gateway, console, quality=quality),
        "feature": FeatureWorkflow(gateway, console, quality=quality),
    }
    return tuple(by_name[name] for name in DEFAULT_ORDER)


def select_workflow(
    workflows: Sequence[Workflow],
    branches: BranchSet,
    prefixes: BranchPrefixes,
) -> Result[Workflow, NoMatchingWorkflow]:
    for workflow in workflows:
        if workflow.test(branches, prefixes):
            return Ok(workflow)
    return Err(NoMatchingWorkflow(current=branches.current, target=branches.target))


def dispatch(
    gateway: GitFlowGateway,
    workflows: Sequence[Workflow],
    console: ConsoleProtocol,
) -> Result[str, FlowError]:
    """Resolve the event's branches, run the matching workflow, return its commit sha."""
    branches = gateway.get_branches()
    if isinstance(branches, Err):
        return branches
    prefixes = gateway.get_prefixes()
    console.print(f"{branches.value.current} -> {branches.value.target}", Style.DIM)

    selected = select_workflow(workflows, branches.value, prefixes)
    if isinstance(selected, Err):
        return Err(selected.error)

    console.header(f"{selected.value.name.upper()} HANDLER")
    return selected.value.handle(branches.value, prefixes)
