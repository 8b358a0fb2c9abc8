"""``GitFlowGateway`` implemented on top of the GitHub CLI.

Every call shells out to ``gh api`` (or ``gh release upload``), which handles
authentication through ``GH_TOKEN`` / ``GITHUB_TOKEN``. Responses are parsed
with the ``structured`` helpers; HTTP failures are mapped to flow errors from
the status line ``gh`` writes to stderr.
"""

from __future__ import annotations

import base64
import binascii
import json
import shutil
from collections.abc import Mapping
from pathlib import Path

from gitflow.core.config import GitFlowConfig
from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_int,
    get_raw_str,
    get_str,
    get_table,
)
from gitflow.github.event import read_event_branches
from gitflow.platform.process import ProcessError
from gitflow.platform.process import run as run_process
from gitflow.services.errors import (
    FlowError,
    FormatError,
    GatewayError,
    NotFoundError,
    PublishError,
)
from gitflow.services.model import (
    BranchPrefixes,
    BranchSet,
    PublishedRelease,
    PullRequest,
    RepoFile,
)
from gitflow.services.timeouts import GH_TIMEOUT_SECONDS, GH_UPLOAD_TIMEOUT_SECONDS


def ensure_gh_available() -> Result[None, GatewayError]:
    if shutil.which("gh") is None:
        return Err(
            GatewayError(
                operation="gh",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def _http_status(error: ProcessError) -> int | None:
    # gh prints e.g. "gh: Not Found (HTTP 404)"
    text = f"{error.stderr}\n{error.stdout}"
    marker = "(HTTP "
    idx = text.find(marker)
    if idx < 0:
        return None
    digits = text[idx + len(marker) : idx + len(marker) + 3]
    return int(digits) if digits.isdigit() else None


def _parse_pull(data: Mapping[str, object]) -> PullRequest | None:
    number = get_int(data, "number")
    url = get_str(data, "html_url")
    if number is None or url is None:
        return None

    head = get_table(data, "head")
    base = get_table(data, "base")
    return PullRequest(
        number=number,
        title=get_str(data, "title") or "",
        body=get_raw_str(data, "body") or "",
        url=url,
        changed_files=get_int(data, "changed_files"),
        commits=get_int(data, "commits"),
        head=get_str(head, "ref") if head is not None else None,
        base=get_str(base, "ref") if base is not None else None,
    )


class GhGateway:
    """Gateway bound to one repository and one checkout."""

    def __init__(
        self,
        *,
        config: GitFlowConfig,
        workdir: Path,
        env: Mapping[str, str],
    ) -> None:
        if config.repository is None:
            raise ValueError("GhGateway requires config.repository")
        self._config = config
        self._repo = config.repository
        self._workdir = workdir
        self._env = env

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _api(
        self,
        endpoint: str,
        *,
        operation: str,
        method: str = "GET",
        query: tuple[tuple[str, str], ...] = (),
        body: Mapping[str, object] | None = None,
    ) -> Result[object | None, FlowError]:
        cmd = ["gh", "api", "-X", method, f"repos/{self._repo}/{endpoint}"]
        for k, v in query:
            cmd.extend(["-f", f"{k}={v}"])

        # File contents and release notes can exceed the per-argument limit of execve.
        payload: str | None = None
        if body is not None:
            cmd.extend(["--input", "-"])
            payload = json.dumps(body)

        result = run_process(cmd, cwd=self._workdir, timeout=GH_TIMEOUT_SECONDS, input=payload)
        if isinstance(result, Err):
            return Err(self._api_error(result.error, operation=operation, endpoint=endpoint))

        # 204 No Content
        if not result.value.strip():
            return Ok(None)

        try:
            obj: object = json.loads(result.value)
        except json.JSONDecodeError as e:
            return Err(
                GatewayError(
                    operation=operation,
                    message=f"gh api returned invalid JSON: {e}",
                    hint=endpoint,
                )
            )
        return Ok(obj)

    def _api_error(self, error: ProcessError, *, operation: str, endpoint: str) -> FlowError:
        status = _http_status(error)
        if status == 404:
            return NotFoundError(what=operation, name=endpoint)
        return GatewayError(
            operation=operation,
            message=str(error) if status is None else f"HTTP {status}",
            hint=error.stderr.strip() or endpoint,
        )

    def _api_dict(
        self,
        endpoint: str,
        *,
        operation: str,
        method: str = "GET",
        query: tuple[tuple[str, str], ...] = (),
        body: Mapping[str, object] | None = None,
    ) -> Result[StrDict, FlowError]:
        result = self._api(endpoint, operation=operation, method=method, query=query, body=body)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        if data is None:
            return Err(
                GatewayError(operation=operation, message="unexpected payload", hint=endpoint)
            )
        return Ok(data)

    # ------------------------------------------------------------------
    # GitFlowGateway
    # ------------------------------------------------------------------

    def get_branches(self) -> Result[BranchSet, FlowError]:
        event = read_event_branches(self._env, self.get_pull_request)
        if isinstance(event, Err):
            return event
        return Ok(
            BranchSet(
                current=event.value.current,
                target=event.value.target,
                main=self._config.branches.main,
                development=self._config.branches.development,
            )
        )

    def get_prefixes(self) -> BranchPrefixes:
        p = self._config.prefixes
        return BranchPrefixes(
            feature=p.feature,
            bugfix=p.bugfix,
            hotfix=p.hotfix,
            release=p.release,
            support=p.support,
            tag=p.tag,
        )

    def repository(self) -> str:
        return self._repo

    def owner(self) -> str:
        return self._repo.split("/", 1)[0]

    def merge(self, head: str, base: str) -> Result[str, FlowError]:
        result = self._api(
            "merges",
            operation=f"merge {head} -> {base}",
            method="POST",
            body={"base": base, "head": head},
        )
        if isinstance(result, Err):
            error = result.error
            if isinstance(error, GatewayError) and error.message == "HTTP 409":
                return Err(
                    GatewayError(
                        operation=error.operation,
                        message="merge conflict",
                        hint=f"Resolve the conflicts between {head} and {base} manually.",
                    )
                )
            return result

        data = as_str_dict(result.value)
        if data is None:
            # Nothing to merge: base already contains head.
            return self._branch_head_sha(base)

        sha = get_str(data, "sha")
        if sha is None:
            return Err(GatewayError(operation=f"merge {head} -> {base}", message="missing sha"))
        return Ok(sha)

    def _branch_head_sha(self, branch: str) -> Result[str, FlowError]:
        data = self._api_dict(f"commits/{branch}", operation=f"read {branch}")
        if isinstance(data, Err):
            return data
        sha = get_str(data.value, "sha")
        if sha is None:
            return Err(GatewayError(operation=f"read {branch}", message="missing sha"))
        return Ok(sha)

    def delete_branch(self, branch: str) -> Result[None, FlowError]:
        result = self._api(
            f"git/refs/heads/{branch}", operation=f"delete {branch}", method="DELETE"
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_tag(self, tag: str, sha: str) -> Result[None, FlowError]:
        result = self._api(
            "git/refs",
            operation=f"create tag {tag}",
            method="POST",
            body={"ref": f"refs/tags/{tag}", "sha": sha},
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def get_file(self, path: str, ref: str) -> Result[RepoFile, FlowError]:
        data = self._api_dict(
            f"contents/{path}", operation=f"read {path}", query=(("ref", ref),)
        )
        if isinstance(data, Err):
            return data

        enc = get_str(data.value, "encoding")
        content = get_str(data.value, "content")
        sha = get_str(data.value, "sha")
        if enc != "base64" or content is None or sha is None:
            return Err(FormatError(path=path, reason="not a file or unexpected encoding"))

        try:
            text = base64.b64decode(content, validate=False).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            # UnicodeDecodeError is a ValueError.
            return Err(FormatError(path=path, reason=f"failed to decode contents: {e}"))
        return Ok(RepoFile(path=path, content=text, sha=sha))

    def update_file(
        self,
        path: str,
        content: str,
        message: str,
        branch: str,
        sha: str | None,
    ) -> Result[None, FlowError]:
        body: dict[str, object] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if sha is not None:
            body["sha"] = sha

        result = self._api(
            f"contents/{path}",
            operation=f"update {path}",
            method="PUT",
            body=body,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_pull_requests(self, head: str) -> Result[list[PullRequest], FlowError]:
        result = self._api(
            "pulls",
            operation="list pull requests",
            query=(("head", head), ("state", "all")),
        )
        if isinstance(result, Err):
            return result

        raw = as_obj_list(result.value)
        if raw is None:
            return Err(GatewayError(operation="list pull requests", message="unexpected payload"))

        out: list[PullRequest] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            pr = _parse_pull(d)
            if pr is not None:
                out.append(pr)
        return Ok(out)

    def get_pull_request(self, number: int) -> Result[PullRequest, FlowError]:
        data = self._api_dict(f"pulls/{number}", operation=f"read pull request #{number}")
        if isinstance(data, Err):
            return data
        pr = _parse_pull(data.value)
        if pr is None:
            return Err(FormatError(path=f"pulls/{number}", reason="unexpected payload"))
        return Ok(pr)

    def create_release(
        self, tag: str, name: str, body: str
    ) -> Result[PublishedRelease, FlowError]:
        data = self._api_dict(
            "releases",
            operation=f"create release {tag}",
            method="POST",
            body={
                "tag_name": tag,
                "name": name,
                "body": body,
                "draft": False,
                "prerelease": False,
            },
        )
        if isinstance(data, Err):
            return Err(
                PublishError(message=f"failed to create release {tag}", hint=_hint(data.error))
            )

        release_id = get_int(data.value, "id")
        url = get_str(data.value, "html_url")
        if release_id is None or url is None:
            return Err(PublishError(message=f"unexpected release payload for {tag}"))
        return Ok(PublishedRelease(id=release_id, url=url))

    def upload_release_asset(self, tag: str, path: Path) -> Result[None, FlowError]:
        cmd = ["gh", "release", "upload", tag, str(path), "--repo", self._repo]
        result = run_process(cmd, cwd=self._workdir, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                PublishError(
                    message=f"failed to upload {path.name}",
                    hint=result.error.stderr.strip() or None,
                )
            )
        return Ok(None)


def _hint(error: FlowError) -> str | None:
    match error:
        case GatewayError(hint=hint) | NotFoundError(hint=hint):
            return hint
        case _:
            return None
