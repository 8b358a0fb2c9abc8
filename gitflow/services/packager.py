"""Build and package the release artifact.

Two project layouts are supported:

- archive-build: an MTA project (``mta.yaml`` at the root) whose build writes
  a ``.mtar`` into ``mta_archives/``. The archive itself is the artifact.
- standard-build: a JavaScript action whose build writes
  ``lib/main/index.js``. The artifact is a zip of the files a consumer of the
  action needs.

Exactly one artifact is produced per run, named ``{project}-v{version}.{ext}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import as_str_dict, get_str
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.output.errors import describe_flow_error
from gitflow.platform.process import run_silent
from gitflow.services.errors import BuildError, BuildStage, FlowError
from gitflow.services.model import ArtifactKind, ReleaseArtifact, Version
from gitflow.services.timeouts import BUILD_TIMEOUT_SECONDS, INSTALL_TIMEOUT_SECONDS
from gitflow.services.version import patch_descriptor_version

PACKAGE_MANIFEST = "package.json"
NPM_LOCK = "package-lock.json"
YARN_LOCK = "yarn.lock"

ARCHIVE_DESCRIPTOR = "mta.yaml"
ARCHIVE_DIR = "mta_archives"
ARCHIVE_EXT = "mtar"

STANDARD_OUTPUT = Path("lib") / "main" / "index.js"
STANDARD_PACKAGE_PATHS = ("lib", "action.yml", PACKAGE_MANIFEST, "README.md", "LICENSE")

UNKNOWN_PROJECT = "unknown-project"


def read_project_name(project_root: Path) -> str:
    """Project name from package.json, or a placeholder.

    npm scopes are dropped (``@acme/widgets`` -> ``widgets``) because the name
    ends up in a file name.
    """
    path = project_root / PACKAGE_MANIFEST
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return UNKNOWN_PROJECT

    data = as_str_dict(obj)
    name = get_str(data, "name") if data is not None else None
    if name is None:
        return UNKNOWN_PROJECT
    return name.rsplit("/", 1)[-1] or UNKNOWN_PROJECT


def install_command(project_root: Path) -> list[str]:
    if (project_root / NPM_LOCK).exists():
        return ["npm", "ci"]
    if (project_root / YARN_LOCK).exists():
        return ["yarn", "install", "--frozen-lockfile"]
    return ["npm", "install"]


def build_command(project_root: Path) -> list[str]:
    if (project_root / YARN_LOCK).exists():
        return ["yarn", "build"]
    return ["npm", "run", "build"]


def classify_project(project_root: Path) -> ArtifactKind:
    if (project_root / ARCHIVE_DESCRIPTOR).is_file():
        return "platform-archive"
    return "standard-package"


def _run_step(
    cmd: list[str],
    *,
    project_root: Path,
    stage: BuildStage,
    timeout: float,
    console: ConsoleProtocol,
) -> Result[None, BuildError]:
    console.print(" ".join(cmd), Style.DIM)
    result = run_silent(cmd, cwd=project_root, timeout=timeout)
    if isinstance(result, Err):
        return Err(
            BuildError(
                stage=stage,
                message=str(result.error),
                path=project_root,
            )
        )
    return Ok(None)


def _zip_paths(zip_path: Path, *, root: Path, names: tuple[str, ...]) -> int:
    """Zip ``names`` (files or directories, relative to ``root``); returns the file count."""
    files: list[tuple[Path, str]] = []
    for name in names:
        src = root / name
        if src.is_file():
            files.append((src, name))
        elif src.is_dir():
            for p in sorted(src.rglob("*")):
                if p.is_file():
                    files.append((p, p.relative_to(root).as_posix()))

    if not files:
        return 0

    zip_path.parent.mkdir(parents=True, exist_ok=True)
    # Checked-out files can carry an mtime before 1980, which ZIP cannot store.
    with ZipFile(zip_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
        for src, arc in files:
            zf.write(src, arcname=arc)
    return len(files)


def _archive_artifact(
    *, project_root: Path, project: str, version: Version, console: ConsoleProtocol
) -> Result[ReleaseArtifact, BuildError]:
    archive_dir = project_root / ARCHIVE_DIR
    if not archive_dir.is_dir():
        return Err(
            BuildError(
                stage="artifact",
                message=f"MTA project detected but {ARCHIVE_DIR} directory not found. "
                "Build may have failed.",
                path=archive_dir,
            )
        )

    archives = sorted(p for p in archive_dir.glob(f"*.{ARCHIVE_EXT}") if p.is_file())
    if not archives:
        return Err(
            BuildError(
                stage="artifact",
                message=f"MTA project detected but no .{ARCHIVE_EXT} files found in "
                f"{ARCHIVE_DIR}. Build may have failed.",
                path=archive_dir,
            )
        )

    target = archive_dir / f"{project}-v{version}.{ARCHIVE_EXT}"
    if archives[0] != target:
        archives[0].replace(target)
    console.print(f"renamed {archives[0].name} -> {target.name}", Style.DIM)
    return Ok(ReleaseArtifact(path=target, kind="platform-archive"))


def _patch_descriptor(
    gateway: GitFlowGateway,
    *,
    branch: str,
    version: Version,
    console: ConsoleProtocol,
) -> None:
    # The archive already exists at this point; a descriptor that cannot be
    # updated is reported and the release continues.
    current = gateway.get_file(ARCHIVE_DESCRIPTOR, branch)
    if isinstance(current, Err):
        console.warning(
            f"{ARCHIVE_DESCRIPTOR} not updated: {describe_flow_error(current.error)}"
        )
        return

    patched = patch_descriptor_version(current.value.content, version)
    if patched == current.value.content:
        console.print(f"{ARCHIVE_DESCRIPTOR} already at version {version}", Style.DIM)
        return

    written = gateway.update_file(
        ARCHIVE_DESCRIPTOR,
        patched,
        f"chore: update {ARCHIVE_DESCRIPTOR} version to {version}",
        branch,
        current.value.sha,
    )
    if isinstance(written, Err):
        console.warning(
            f"{ARCHIVE_DESCRIPTOR} not updated: {describe_flow_error(written.error)}"
        )
        return
    console.print(f"{ARCHIVE_DESCRIPTOR} version updated to {version}", Style.DIM)


def build_release_artifact(
    gateway: GitFlowGateway,
    *,
    project_root: Path,
    project: str,
    version: Version,
    branch: str,
    console: ConsoleProtocol,
) -> Result[ReleaseArtifact, FlowError]:
    """Install, build, classify and package; returns the single release artifact."""
    console.print(f"building {project} {version}", Style.DIM)

    installed = _run_step(
        install_command(project_root),
        project_root=project_root,
        stage="install",
        timeout=INSTALL_TIMEOUT_SECONDS,
        console=console,
    )
    if isinstance(installed, Err):
        return installed

    built = _run_step(
        build_command(project_root),
        project_root=project_root,
        stage="build",
        timeout=BUILD_TIMEOUT_SECONDS,
        console=console,
    )
    if isinstance(built, Err):
        return built

    kind = classify_project(project_root)
    if kind == "platform-archive":
        console.info("MTA project detected, looking for archive")
        archive = _archive_artifact(
            project_root=project_root, project=project, version=version, console=console
        )
        if isinstance(archive, Err):
            return archive
        _patch_descriptor(gateway, branch=branch, version=version, console=console)
        return archive

    console.info("standard project detected, verifying build output")
    if not (project_root / STANDARD_OUTPUT).is_file():
        return Err(
            BuildError(
                stage="output",
                message=f"build output not found, expected {STANDARD_OUTPUT.as_posix()}",
                path=project_root / STANDARD_OUTPUT,
            )
        )

    zip_path = project_root / f"{project}-v{version}.zip"
    count = _zip_paths(zip_path, root=project_root, names=STANDARD_PACKAGE_PATHS)
    if count == 0:
        return Err(
            BuildError(stage="package", message="nothing to package", path=project_root)
        )
    console.print(f"packaged {count} files into {zip_path.name}", Style.DIM)
    return Ok(ReleaseArtifact(path=zip_path, kind="standard-package"))
