"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitflow.core.errors import ErrorCode
from gitflow.output.console import Style
from gitflow.services.errors import (
    BuildError,
    ChangelogError,
    FlowError,
    FormatError,
    GatewayError,
    NoMatchingWorkflow,
    NotFoundError,
    PublishError,
    ValidationError,
)

if TYPE_CHECKING:
    from gitflow.output.console import ConsoleProtocol

__all__ = ["describe_flow_error", "flow_error_exit_code", "print_flow_error"]


def describe_flow_error(error: FlowError) -> str:
    """One-line description of a workflow failure."""
    match error:
        case ValidationError(branch=branch, expected=expected):
            return f"branch '{branch}' does not match release pattern '{expected}'"
        case FormatError(path=path, reason=reason):
            return f"invalid {path}: {reason}"
        case NotFoundError(what=what, name=name):
            return f"{what} not found: {name}"
        case BuildError(stage=stage, message=message):
            return f"{stage} failed: {message}"
        case ChangelogError(message=message):
            return f"changelog: {message}"
        case PublishError(message=message):
            return f"release publication failed: {message}"
        case GatewayError(operation=operation, message=message):
            return f"{operation} failed: {message}"
        case NoMatchingWorkflow(current=current, target=target):
            return f"no workflow handles '{current}' -> '{target}'"


def print_flow_error(error: FlowError, console: ConsoleProtocol) -> None:
    """Print a workflow failure with its hint, if any."""
    console.error(describe_flow_error(error))
    match error:
        case NotFoundError(hint=hint) | PublishError(hint=hint) | GatewayError(hint=hint):
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case BuildError(path=path):
            if path is not None:
                console.print(f"path: {path}", Style.DIM)
        case _:
            pass


def flow_error_exit_code(error: FlowError) -> int:
    """Get the process exit code for a workflow failure."""
    match error:
        case ValidationError() | FormatError() | NoMatchingWorkflow():
            return int(ErrorCode.USER_ERROR)
        case BuildError():
            return int(ErrorCode.BUILD_ERROR)
        case GatewayError() | PublishError():
            return int(ErrorCode.NETWORK_ERROR)
        case NotFoundError() | ChangelogError():
            return int(ErrorCode.IO_ERROR)
