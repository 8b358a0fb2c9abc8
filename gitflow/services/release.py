"""Release promotion: release/X.Y.Z -> development + main, tag, build, publish.

The pipeline is a fixed sequence of blocking steps. Each step either returns a
value the later steps need (version, main sha, artifact, PR description) or a
``FlowError`` that aborts the run. Only the changelog step is best-effort.

Nothing is rolled back: if a step fails after the merges, the repository is
left promoted and the console lists what was already applied.
"""

from __future__ import annotations

from pathlib import Path

from gitflow.core.result import Err, Ok, Result
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.output.errors import describe_flow_error
from gitflow.services.changelog import update_changelog
from gitflow.services.errors import FlowError
from gitflow.services.metadata import resolve_release_metadata
from gitflow.services.model import (
    BranchPrefixes,
    BranchSet,
    PullRequestMetadata,
    ReleaseArtifact,
    ReleaseOutcome,
    Version,
)
from gitflow.services.packager import PACKAGE_MANIFEST, build_release_artifact, read_project_name
from gitflow.services.version import extract_version, patch_manifest_version, tag_name
from gitflow.services.workflows import has_prefix

RELEASE_STEPS = 10


def release_title(version: Version) -> str:
    return f"Release v{version}"


def render_release_body(
    *,
    version: Version,
    tag: str,
    repository: str,
    artifact: ReleaseArtifact,
    metadata: PullRequestMetadata,
) -> str:
    purpose = (
        "Complete package ready for deployment"
        if artifact.kind == "platform-archive"
        else "Complete package ready for use"
    )
    lines = [
        f"## New Release v{version}",
        "",
        "This release includes:",
        "",
        metadata.body.strip() or "Release updates and improvements",
        "",
        "## Assets",
        "",
        f"- `{artifact.name}` - {purpose}",
    ]
    if artifact.kind == "standard-package":
        lines.extend(
            [
                "",
                "## Usage",
                "",
                "```yaml",
                "- name: Run Git Flow",
                f"  uses: {repository}@{tag}",
                "  with:",
                "    github_token: ${{ secrets.GITHUB_TOKEN }}",
                "```",
            ]
        )
    if metadata.url:
        lines.extend(["", f"[See PR]({metadata.url})"])
    return "\n".join(lines) + "\n"


def update_manifest_version(
    gateway: GitFlowGateway,
    *,
    branch: str,
    version: Version,
    console: ConsoleProtocol,
) -> Result[None, FlowError]:
    """Set package.json ``version`` on ``branch`` and commit it."""
    current = gateway.get_file(PACKAGE_MANIFEST, branch)
    if isinstance(current, Err):
        return current

    patched = patch_manifest_version(current.value.content, version, path=PACKAGE_MANIFEST)
    if isinstance(patched, Err):
        return patched

    written = gateway.update_file(
        PACKAGE_MANIFEST,
        patched.value,
        f"chore: update {PACKAGE_MANIFEST} version to {version}",
        branch,
        current.value.sha,
    )
    if isinstance(written, Err):
        return written
    console.print(f"{PACKAGE_MANIFEST} version updated to {version}", Style.DIM)
    return Ok(None)


class ReleaseWorkflow:
    """Promote a release branch to a tagged, published release."""

    name = "release"

    def __init__(
        self,
        gateway: GitFlowGateway,
        console: ConsoleProtocol,
        *,
        project_root: Path,
    ) -> None:
        self._gateway = gateway
        self._console = console
        self._project_root = project_root

    def test(self, branches: BranchSet, prefixes: BranchPrefixes) -> bool:
        return has_prefix(branches.current, prefixes.release)

    def handle(self, branches: BranchSet, prefixes: BranchPrefixes) -> Result[str, FlowError]:
        outcome = self.run(branches, prefixes)
        if isinstance(outcome, Err):
            return outcome
        return Ok(outcome.value.sha)

    def _step(self, n: int, title: str) -> None:
        self._console.header(f"[{n}/{RELEASE_STEPS}] {title}")

    def _abort(self, error: FlowError, applied: list[str]) -> Err[FlowError]:
        if applied:
            self._console.warning(
                "release aborted after partial promotion (not rolled back): " + "; ".join(applied)
            )
        return Err(error)

    def run(
        self, branches: BranchSet, prefixes: BranchPrefixes
    ) -> Result[ReleaseOutcome, FlowError]:
        gateway = self._gateway
        console = self._console
        current = branches.current
        applied: list[str] = []

        self._step(1, "Version")
        version_result = extract_version(current, prefixes.release)
        if isinstance(version_result, Err):
            return Err(version_result.error)
        version = version_result.value
        console.info(f"version: {version}")

        self._step(2, "Project")
        project = read_project_name(self._project_root)
        console.info(f"project name: {project}")

        self._step(3, "Package manifest")
        manifest = update_manifest_version(
            gateway, branch=current, version=version, console=console
        )
        if isinstance(manifest, Err):
            return Err(manifest.error)
        applied.append(f"{PACKAGE_MANIFEST} bumped on {current}")

        self._step(4, "Changelog")
        metadata: PullRequestMetadata | None = None
        found = resolve_release_metadata(
            gateway, branch=current, release_prefix=prefixes.release, console=console
        )
        if isinstance(found, Err):
            console.warning(
                f"changelog written without PR details: {describe_flow_error(found.error)}"
            )
        else:
            metadata = found.value
        changelog = update_changelog(
            gateway, branch=current, version=version, metadata=metadata, console=console
        )
        if isinstance(changelog, Err):
            console.warning(f"{describe_flow_error(changelog.error)}; continuing release")
        else:
            console.print("changelog updated", Style.DIM)

        self._step(5, "Merge")
        console.print(f"merge {current} -> {branches.development}", Style.DIM)
        dev = gateway.merge(current, branches.development)
        if isinstance(dev, Err):
            return self._abort(dev.error, applied)
        applied.append(f"merged into {branches.development}")

        console.print(f"merge {current} -> {branches.main}", Style.DIM)
        main = gateway.merge(current, branches.main)
        if isinstance(main, Err):
            return self._abort(main.error, applied)
        applied.append(f"merged into {branches.main}")
        sha = main.value
        console.info(f"{branches.main} sha: {sha}")

        self._step(6, "Tag")
        tag = tag_name(current, prefixes.release, prefixes.tag)
        tagged = gateway.create_tag(tag, sha)
        if isinstance(tagged, Err):
            return self._abort(tagged.error, applied)
        applied.append(f"tag {tag} created")
        console.info(f"tag: {tag} -> {sha}")

        self._step(7, "Build")
        artifact = build_release_artifact(
            gateway,
            project_root=self._project_root,
            project=project,
            version=version,
            branch=current,
            console=console,
        )
        if isinstance(artifact, Err):
            return self._abort(artifact.error, applied)
        console.info(f"artifact: {artifact.value.path}")

        self._step(8, "Pull request")
        if metadata is None:
            found = resolve_release_metadata(
                gateway, branch=current, release_prefix=prefixes.release, console=console
            )
            if isinstance(found, Err):
                return self._abort(found.error, applied)
            metadata = found.value
        console.print(f"release notes from {metadata.url}", Style.DIM)

        self._step(9, "Publish")
        body = render_release_body(
            version=version,
            tag=tag,
            repository=gateway.repository(),
            artifact=artifact.value,
            metadata=metadata,
        )
        release = gateway.create_release(tag, release_title(version), body)
        if isinstance(release, Err):
            return self._abort(release.error, applied)
        applied.append(f"release {tag} published")

        uploaded = gateway.upload_release_asset(tag, artifact.value.path)
        if isinstance(uploaded, Err):
            return self._abort(uploaded.error, applied)
        console.info(f"asset uploaded: {artifact.value.name}")

        self._step(10, "Cleanup")
        deleted = gateway.delete_branch(current)
        if isinstance(deleted, Err):
            return self._abort(deleted.error, applied)

        console.success(f"{release_title(version)}: {release.value.url}")
        return Ok(
            ReleaseOutcome(sha=sha, tag=tag, artifact=artifact.value, release=release.value)
        )
