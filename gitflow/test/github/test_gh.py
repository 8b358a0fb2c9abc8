from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from gitflow.core.config import GitFlowConfig
from gitflow.core.result import Err, Ok, Result
from gitflow.github import gh as gh_mod
from gitflow.github.gh import GhGateway
from gitflow.platform.process import ProcessError
from gitflow.services.errors import GatewayError, NotFoundError, PublishError


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "api", "repos/acme/widgets"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _gateway(tmp_path: Path) -> GhGateway:
    config = GitFlowConfig(repository="acme/widgets")
    return GhGateway(config=config, workdir=tmp_path, env={})


def _install(
    monkeypatch: pytest.MonkeyPatch,
    responses: list[Result[str, ProcessError]],
    stdin: list[str | None] | None = None,
) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None, input: str | None = None
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        calls.append(cmd)
        if stdin is not None:
            stdin.append(input)
        return responses.pop(0)

    monkeypatch.setattr(gh_mod, "run_process", fake_run)
    return calls


def test_requires_repository(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        GhGateway(config=GitFlowConfig(), workdir=tmp_path, env={})


def test_merge_returns_sha(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    stdin: list[str | None] = []
    calls = _install(monkeypatch, [Ok('{"sha": "abc123"}')], stdin)
    result = _gateway(tmp_path).merge("feature/x", "development")
    assert result == Ok("abc123")
    assert calls == [
        ["gh", "api", "-X", "POST", "repos/acme/widgets/merges", "--input", "-"]
    ]
    assert stdin[0] is not None
    assert json.loads(stdin[0]) == {"base": "development", "head": "feature/x"}


def test_merge_conflict(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _install(monkeypatch, [_err(stderr="gh: Merge conflict (HTTP 409)")])
    result = _gateway(tmp_path).merge("feature/x", "development")
    assert isinstance(result, Err)
    assert isinstance(result.error, GatewayError)
    assert result.error.message == "merge conflict"


def test_merge_nothing_to_merge_uses_base_head(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _install(monkeypatch, [Ok(""), Ok('{"sha": "base-sha"}')])
    result = _gateway(tmp_path).merge("feature/x", "development")
    assert result == Ok("base-sha")
    assert calls[1][4] == "repos/acme/widgets/commits/development"


def test_merge_is_not_retried(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _install(monkeypatch, [_err(stderr="gh: Bad Gateway (HTTP 502)")])
    result = _gateway(tmp_path).merge("feature/x", "development")
    assert isinstance(result, Err)
    assert len(calls) == 1


def test_get_file_decodes_base64(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    encoded = base64.b64encode(b'{"name": "widgets"}').decode("ascii")
    payload = {"encoding": "base64", "content": encoded + "\n", "sha": "blob1"}
    calls = _install(monkeypatch, [Ok(json.dumps(payload))])
    result = _gateway(tmp_path).get_file("package.json", "release/1.0.0")
    assert isinstance(result, Ok)
    assert result.value.content == '{"name": "widgets"}'
    assert result.value.sha == "blob1"
    assert "ref=release/1.0.0" in calls[0]


def test_get_file_missing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _install(monkeypatch, [_err(stderr="gh: Not Found (HTTP 404)")])
    result = _gateway(tmp_path).get_file("CHANGELOG.md", "release/1.0.0")
    assert isinstance(result, Err)
    assert isinstance(result.error, NotFoundError)


def test_update_file_sends_sha_when_known(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    stdin: list[str | None] = []
    _install(monkeypatch, [Ok("{}"), Ok("{}")], stdin)
    gateway = _gateway(tmp_path)
    assert gateway.update_file("a.md", "x", "msg", "b", "blob1") == Ok(None)
    assert gateway.update_file("a.md", "x", "msg", "b", None) == Ok(None)
    bodies = [json.loads(s) for s in stdin if s is not None]
    assert bodies[0]["sha"] == "blob1"
    assert "sha" not in bodies[1]
    assert base64.b64decode(bodies[0]["content"]) == b"x"


def test_large_file_content_is_sent_on_stdin(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    stdin: list[str | None] = []
    calls = _install(monkeypatch, [Ok("{}")], stdin)
    content = "# Changelog\n" + "x" * 300_000

    result = _gateway(tmp_path).update_file("CHANGELOG.md", content, "msg", "b", "blob1")

    assert result == Ok(None)
    assert max(len(arg) for arg in calls[0]) < 1000
    assert stdin[0] is not None
    body = json.loads(stdin[0])
    assert base64.b64decode(body["content"]).decode("utf-8") == content


def test_list_pull_requests(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    payload = [
        {"number": 5, "title": "Release", "body": None, "html_url": "https://x/5"},
        {"title": "broken"},
    ]
    calls = _install(monkeypatch, [Ok(json.dumps(payload))])
    result = _gateway(tmp_path).list_pull_requests("acme:release/1.0.0")
    assert isinstance(result, Ok)
    assert [pr.number for pr in result.value] == [5]
    assert result.value[0].body == ""
    assert "head=acme:release/1.0.0" in calls[0]
    assert "state=all" in calls[0]


def test_create_release(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    stdin: list[str | None] = []
    _install(monkeypatch, [Ok('{"id": 9, "html_url": "https://x/releases/9"}')], stdin)
    notes = "release notes\n" * 20_000
    result = _gateway(tmp_path).create_release("v1.0.0", "Release v1.0.0", notes)
    assert isinstance(result, Ok)
    assert result.value.id == 9
    assert stdin[0] is not None
    assert json.loads(stdin[0]) == {
        "tag_name": "v1.0.0",
        "name": "Release v1.0.0",
        "body": notes,
        "draft": False,
        "prerelease": False,
    }


def test_create_release_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _install(monkeypatch, [_err(stderr="gh: Validation Failed (HTTP 422)")])
    result = _gateway(tmp_path).create_release("v1.0.0", "Release v1.0.0", "body")
    assert isinstance(result, Err)
    assert isinstance(result.error, PublishError)


def test_upload_release_asset(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    asset = tmp_path / "widgets-v1.0.0.zip"
    calls = _install(monkeypatch, [Ok("")])
    assert _gateway(tmp_path).upload_release_asset("v1.0.0", asset) == Ok(None)
    assert calls == [
        ["gh", "release", "upload", "v1.0.0", str(asset), "--repo", "acme/widgets"]
    ]


def test_get_branches_from_event(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(
        json.dumps({"pull_request": {"head": {"ref": "feature/x"}, "base": {"ref": "quality"}}}),
        encoding="utf-8",
    )
    _install(monkeypatch, [])
    config = GitFlowConfig(repository="acme/widgets")
    gateway = GhGateway(config=config, workdir=tmp_path, env={"GITHUB_EVENT_PATH": str(event)})
    result = gateway.get_branches()
    assert isinstance(result, Ok)
    assert result.value.current == "feature/x"
    assert result.value.target == "quality"
    assert result.value.main == "main"
    assert result.value.development == "development"
