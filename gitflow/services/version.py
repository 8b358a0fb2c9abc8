from __future__ import annotations

import json
import re

from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import as_str_dict
from gitflow.services.errors import FormatError, ValidationError
from gitflow.services.model import Version


_VERSION_PATTERN = r"(\d+)\.(\d+)\.(\d+)"
_DESCRIPTOR_VERSION_RE = re.compile(r"^version:[^\r\n]*", re.MULTILINE)


def extract_version(branch: str, release_prefix: str) -> Result[Version, ValidationError]:
    """Parse ``<release_prefix>X.Y.Z`` into a Version.

    The match is anchored at both ends: ``release/1.2.3-rc`` is rejected.
    """
    pattern = re.compile(rf"^{re.escape(release_prefix)}{_VERSION_PATTERN}$")
    m = pattern.fullmatch(branch)
    if m is None:
        return Err(ValidationError(branch=branch, expected=f"{release_prefix}X.Y.Z"))
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def tag_name(current: str, release_prefix: str, tag_prefix: str) -> str:
    # release/2.3.0 -> v2.3.0
    return f"{tag_prefix}{current.removeprefix(release_prefix)}"


def patch_manifest_version(
    content: str, version: Version, *, path: str = "package.json"
) -> Result[str, FormatError]:
    """Set the ``version`` field of a JSON package manifest."""
    try:
        obj: object = json.loads(content)
    except json.JSONDecodeError as e:
        return Err(FormatError(path=path, reason=f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(FormatError(path=path, reason="manifest root must be a JSON object"))

    data["version"] = str(version)
    return Ok(json.dumps(data, indent=2, ensure_ascii=False))


def patch_descriptor_version(content: str, version: Version) -> str:
    """Rewrite the first top-level ``version:`` line of a YAML-like descriptor.

    Content without such a line is returned unchanged.
    """
    return _DESCRIPTOR_VERSION_RE.sub(f"version: {version}", content, count=1)
