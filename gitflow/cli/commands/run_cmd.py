"""Run command - dispatch the pull-request event to its git-flow workflow."""

from __future__ import annotations

from pathlib import Path

import typer

from gitflow.cli.context import CLIContext, build_context
from gitflow.core.result import Err, Ok
from gitflow.output.console import Style
from gitflow.output.errors import flow_error_exit_code, print_flow_error
from gitflow.services.dispatcher import (
    Workflow,
    default_workflows,
    dispatch,
    select_workflow,
)

CONFIG_OPTION = typer.Option(
    None, "--config", help="Path to gitflow.toml (default: <project-root>/gitflow.toml)"
)
PROJECT_ROOT_OPTION = typer.Option(
    None, "--project-root", help="Checkout to build release artifacts from (default: cwd)"
)


def _workflows(ctx: CLIContext) -> tuple[Workflow, ...]:
    return default_workflows(
        ctx.gateway,
        ctx.console,
        project_root=ctx.project_root,
        quality=ctx.config.branches.quality,
    )


def run(
    config: Path | None = CONFIG_OPTION,
    project_root: Path | None = PROJECT_ROOT_OPTION,
) -> None:
    """Run the workflow matching the current pull request."""
    ctx = build_context(config, project_root)

    match dispatch(ctx.gateway, _workflows(ctx), ctx.console):
        case Ok(sha):
            ctx.console.success(f"done: {sha}")
            typer.echo(sha)
        case Err(error):
            print_flow_error(error, ctx.console)
            raise typer.Exit(code=flow_error_exit_code(error))


def which(
    config: Path | None = CONFIG_OPTION,
    project_root: Path | None = PROJECT_ROOT_OPTION,
) -> None:
    """Print the workflow that would run, without changing anything."""
    ctx = build_context(config, project_root)

    branches = ctx.gateway.get_branches()
    if isinstance(branches, Err):
        print_flow_error(branches.error, ctx.console)
        raise typer.Exit(code=flow_error_exit_code(branches.error))

    ctx.console.print(f"{branches.value.current} -> {branches.value.target}", Style.DIM)
    selected = select_workflow(_workflows(ctx), branches.value, ctx.gateway.get_prefixes())
    match selected:
        case Ok(workflow):
            typer.echo(workflow.name)
        case Err(error):
            print_flow_error(error, ctx.console)
            raise typer.Exit(code=flow_error_exit_code(error))
