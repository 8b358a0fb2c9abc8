from __future__ import annotations

import json
from pathlib import Path

from gitflow.core.result import Err, Ok, Result
from gitflow.github.event import pull_number_from_ref, read_event_branches
from gitflow.services.errors import FlowError, FormatError, NotFoundError
from gitflow.services.model import PullRequest


def _no_fetch(number: int) -> Result[PullRequest, FlowError]:
    raise AssertionError(f"unexpected fetch of #{number}")


def _write_event(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_reads_pull_request_refs(tmp_path: Path) -> None:
    path = _write_event(
        tmp_path,
        {"pull_request": {"head": {"ref": "feature/x"}, "base": {"ref": "development"}}},
    )
    result = read_event_branches({"GITHUB_EVENT_PATH": str(path)}, _no_fetch)
    assert isinstance(result, Ok)
    assert (result.value.current, result.value.target) == ("feature/x", "development")


def test_falls_back_to_github_ref(tmp_path: Path) -> None:
    path = _write_event(tmp_path, {"action": "submitted"})
    fetched: list[int] = []

    def fetch(number: int) -> Result[PullRequest, FlowError]:
        fetched.append(number)
        return Ok(
            PullRequest(
                number=number,
                title="t",
                body="",
                url="u",
                head="hotfix/y",
                base="main",
            )
        )

    env = {"GITHUB_EVENT_PATH": str(path), "GITHUB_REF": "refs/pull/42/merge"}
    result = read_event_branches(env, fetch)
    assert isinstance(result, Ok)
    assert result.value.current == "hotfix/y"
    assert fetched == [42]


def test_no_pull_request_context() -> None:
    result = read_event_branches({"GITHUB_REF": "refs/heads/main"}, _no_fetch)
    assert isinstance(result, Err)
    assert isinstance(result.error, NotFoundError)


def test_invalid_payload(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    path.write_text("{not json", encoding="utf-8")
    result = read_event_branches({"GITHUB_EVENT_PATH": str(path)}, _no_fetch)
    assert isinstance(result, Err)
    assert isinstance(result.error, FormatError)


def test_pull_number_from_ref() -> None:
    assert pull_number_from_ref("refs/pull/7/merge") == 7
    assert pull_number_from_ref("refs/pull/7/head") == 7
    assert pull_number_from_ref("refs/heads/feature/x") is None
