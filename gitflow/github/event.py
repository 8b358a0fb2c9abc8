"""Resolve the branch pair from the triggering GitHub event.

The action runs on ``pull_request_review`` (and ``pull_request``) events. The
payload at ``GITHUB_EVENT_PATH`` normally carries ``pull_request.head.ref`` and
``pull_request.base.ref``. When it does not (re-runs, synthetic events), the
pull request number is taken from ``GITHUB_REF`` (``refs/pull/<n>/merge``) and
looked up through the gateway.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import as_str_dict, get_str, get_table
from gitflow.services.errors import FlowError, FormatError, NotFoundError
from gitflow.services.model import PullRequest

_PULL_REF_RE = re.compile(r"^refs/pull/(\d+)/(?:merge|head)$")


@dataclass(frozen=True, slots=True)
class EventBranches:
    current: str
    target: str


def _from_payload(payload: Mapping[str, object]) -> EventBranches | None:
    pr = get_table(payload, "pull_request")
    if pr is None:
        return None
    head = get_table(pr, "head")
    base = get_table(pr, "base")
    if head is None or base is None:
        return None
    current = get_str(head, "ref")
    target = get_str(base, "ref")
    if current is None or target is None:
        return None
    return EventBranches(current=current, target=target)


def _load_payload(path: Path) -> Result[Mapping[str, object], FlowError]:
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(NotFoundError(what="event payload", name=str(path), hint=str(e)))
    except json.JSONDecodeError as e:
        return Err(FormatError(path=str(path), reason=f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(FormatError(path=str(path), reason="event payload must be a JSON object"))
    return Ok(data)


def pull_number_from_ref(ref: str) -> int | None:
    m = _PULL_REF_RE.match(ref.strip())
    if m is None:
        return None
    return int(m.group(1))


def read_event_branches(
    env: Mapping[str, str],
    fetch_pull: Callable[[int], Result[PullRequest, FlowError]],
) -> Result[EventBranches, FlowError]:
    """Return the head (current) and base (target) branch of the event's PR."""
    event_path = env.get("GITHUB_EVENT_PATH", "").strip()
    if event_path:
        payload = _load_payload(Path(event_path))
        if isinstance(payload, Err):
            return payload
        branches = _from_payload(payload.value)
        if branches is not None:
            return Ok(branches)

    ref = env.get("GITHUB_REF", "")
    number = pull_number_from_ref(ref)
    if number is None:
        return Err(
            NotFoundError(
                what="pull request for event",
                name=ref or "(GITHUB_REF unset)",
                hint="Trigger the action on pull_request_review or pull_request events.",
            )
        )

    pr = fetch_pull(number)
    if isinstance(pr, Err):
        return pr
    if pr.value.head is None or pr.value.base is None:
        return Err(
            FormatError(path=f"pulls/{number}", reason="pull request has no head/base ref")
        )
    return Ok(EventBranches(current=pr.value.head, target=pr.value.base))
