from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gitflow.core.config import GitFlowConfig, load_config
from gitflow.core.errors import ErrorCode
from gitflow.core.result import Err
from gitflow.github.gateway import GitFlowGateway
from gitflow.github.gh import GhGateway, ensure_gh_available
from gitflow.output.console import ConsoleProtocol, RichConsole

DEFAULT_CONFIG_NAME = "gitflow.toml"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: GitFlowConfig
    gateway: GitFlowGateway
    console: ConsoleProtocol
    project_root: Path


def _resolve_config_path(config_path: Path | None, project_root: Path) -> Path | None:
    if config_path is not None:
        return config_path.expanduser()
    candidate = project_root / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def build_context(config_path: Path | None = None, project_root: Path | None = None) -> CLIContext:
    root = (project_root or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        typer.echo(f"error: project root is not a directory: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config(_resolve_config_path(config_path, root), os.environ)
    if isinstance(config_result, Err):
        error = config_result.error
        suffix = f" ({error.path})" if error.path is not None else ""
        typer.echo(f"error: {error.message}{suffix}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    gh = ensure_gh_available()
    if isinstance(gh, Err):
        typer.echo(f"error: {gh.error.message}", err=True)
        if gh.error.hint:
            typer.echo(f"hint: {gh.error.hint}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = config_result.value
    return CLIContext(
        config=config,
        gateway=GhGateway(config=config, workdir=root, env=dict(os.environ)),
        console=RichConsole(),
        project_root=root,
    )
