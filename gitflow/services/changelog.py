"""CHANGELOG.md maintenance.

Entries are kept newest first. A document managed by this module looks like::

    # Changelog

    All notable changes to this project will be documented in this file.

    # V1.1.0

    This release includes:

    ...

    ---

    # V1.0.0
    ...

Changelog maintenance is best-effort: ``update_changelog`` reports every
failure as ``ChangelogError`` and the release workflow carries on.
"""

from __future__ import annotations

from gitflow.core.result import Err, Ok, Result
from gitflow.github.gateway import GitFlowGateway
from gitflow.output.console import ConsoleProtocol, Style
from gitflow.output.errors import describe_flow_error
from gitflow.services.errors import ChangelogError, NotFoundError
from gitflow.services.model import PullRequestMetadata, Version

CHANGELOG_PATH = "CHANGELOG.md"
CHANGELOG_TITLE = "# Changelog"
CHANGELOG_DESCRIPTION = "All notable changes to this project will be documented in this file."
DEFAULT_BODY = "Release updates and improvements"
HEADER_FALLBACK_LINES = 4


def render_entry(version: Version, body: str, url: str | None) -> str:
    lines = [
        f"# V{version}",
        "",
        "This release includes:",
        "",
        body.strip() or DEFAULT_BODY,
        "",
    ]
    if url:
        lines.extend([f"[See PR]({url})", ""])
    lines.extend(["---", "", ""])
    return "\n".join(lines)


def _header_end(lines: list[str]) -> int:
    # The header is the title plus the intro text under it; it stops at the
    # first heading of any level after the title line.
    title = next((i for i, line in enumerate(lines) if line.strip() == CHANGELOG_TITLE), 0)
    for i in range(title + 1, len(lines)):
        if lines[i].startswith("#"):
            return i
    return min(max(HEADER_FALLBACK_LINES, title + 1), len(lines))


def splice_entry(existing: str, entry: str) -> str:
    """Insert ``entry`` after the header block of ``existing``.

    The header block runs from the title to the first heading after it (any
    level, so ``## 1.0.0`` entries count), or is the first four lines when the
    document has no further heading. Everything after the header is kept
    byte-for-byte behind the new entry, so entries stay newest first. Without
    a changelog title a fresh header is synthesized and ``existing`` follows
    the new entry verbatim.
    """
    if CHANGELOG_TITLE not in existing:
        return f"{CHANGELOG_TITLE}\n\n{CHANGELOG_DESCRIPTION}\n\n{entry}{existing}"

    lines = existing.split("\n")
    idx = _header_end(lines)
    header = "\n".join(lines[:idx]).rstrip()
    rest = "\n".join(lines[idx:])
    return f"{header}\n\n{entry}{rest}"


def update_changelog(
    gateway: GitFlowGateway,
    *,
    branch: str,
    version: Version,
    metadata: PullRequestMetadata | None,
    console: ConsoleProtocol,
) -> Result[None, ChangelogError]:
    """Prepend a release entry to CHANGELOG.md on ``branch`` and commit it."""
    existing = ""
    sha: str | None = None
    current = gateway.get_file(CHANGELOG_PATH, branch)
    if isinstance(current, Err):
        if not isinstance(current.error, NotFoundError):
            return Err(ChangelogError(f"read failed: {describe_flow_error(current.error)}"))
        console.print(f"{CHANGELOG_PATH} not found on {branch}; creating it", Style.DIM)
    else:
        existing = current.value.content
        sha = current.value.sha

    entry = render_entry(
        version,
        metadata.body if metadata is not None else "",
        metadata.url if metadata is not None else None,
    )
    console.print(f"changelog entry: {entry[:200]!r}", Style.DIM)

    written = gateway.update_file(
        CHANGELOG_PATH,
        splice_entry(existing, entry),
        f"docs: update changelog for version {version}",
        branch,
        sha,
    )
    if isinstance(written, Err):
        return Err(ChangelogError(f"write failed: {describe_flow_error(written.error)}"))
    return Ok(None)
