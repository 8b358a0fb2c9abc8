from __future__ import annotations

from gitflow.core.result import Err, Ok, Result
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.output.errors import describe_flow_error
from gitflow.services.errors import FlowError, NotFoundError
from gitflow.services.model import PullRequest, PullRequestMetadata


def head_candidates(branch: str, *, release_prefix: str, owner: str) -> list[str]:
    """Head-reference encodings to try, in order, without duplicates."""
    candidates = [branch, branch.removeprefix(release_prefix), f"{owner}:{branch}"]
    out: list[str] = []
    for c in candidates:
        if c and c not in out:
            out.append(c)
    return out


def describe_pull_request(pr: PullRequest) -> str:
    """Release description: the PR body, or a summary when the body is blank."""
    if pr.body.strip():
        return pr.body

    changed = pr.changed_files if pr.changed_files is not None else "Unknown"
    commits = pr.commits if pr.commits is not None else "Multiple"
    return "\n".join(
        [
            f"**{pr.title}**",
            "",
            f"This release includes changes from PR #{pr.number}.",
            "",
            f"**Changed files:** {changed} files modified",
            f"**Commits:** {commits} commits included",
            "",
            "For detailed information, please check the pull request.",
        ]
    )


def resolve_release_metadata(
    gateway: GitFlowGateway,
    *,
    branch: str,
    release_prefix: str,
    console: ConsoleProtocol,
) -> Result[PullRequestMetadata, FlowError]:
    """Find the pull request for ``branch`` and derive the release description.

    The first candidate that yields any pull request wins, and within it the
    first pull request in API order.
    """
    console.print(f"searching pull request for {branch}", Style.DIM)
    candidates = head_candidates(branch, release_prefix=release_prefix, owner=gateway.owner())

    for head in candidates:
        listed = gateway.list_pull_requests(head)
        if isinstance(listed, Err):
            console.print(
                f"pull request search with head '{head}' failed: "
                f"{describe_flow_error(listed.error)}",
                Style.DIM,
            )
            continue
        if not listed.value:
            continue

        pr = listed.value[0]
        console.info(f"found PR #{pr.number}: {pr.title}")

        detail = gateway.get_pull_request(pr.number)
        if isinstance(detail, Err):
            return detail

        detailed = detail.value
        if not detailed.body.strip() and pr.body.strip():
            # List payloads occasionally carry a body the detail call lacks.
            detailed = pr
        return Ok(PullRequestMetadata(body=describe_pull_request(detailed), url=pr.url))

    return Err(
        NotFoundError(
            what="pull request",
            name=branch,
            hint=(
                f"tried heads: {', '.join(candidates)}. "
                "Open a pull request for this release branch."
            ),
        )
    )
