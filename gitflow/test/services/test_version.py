from __future__ import annotations

import json

import pytest

from gitflow.core.result import Err, Ok
from gitflow.services.model import Version
from gitflow.services.version import (
    extract_version,
    patch_descriptor_version,
    patch_manifest_version,
    tag_name,
)


def test_extract_version() -> None:
    result = extract_version("release/1.2.3", "release/")
    assert isinstance(result, Ok)
    assert result.value == Version(1, 2, 3)
    assert str(result.value) == "1.2.3"


@pytest.mark.parametrize(
    "branch",
    ["release/abc", "release/1.2", "release/1.2.3-rc", "release/v1.2.3", "other/1.2.3", ""],
)
def test_extract_version_rejects_bad_shapes(branch: str) -> None:
    result = extract_version(branch, "release/")
    assert isinstance(result, Err)
    assert result.error.branch == branch
    assert result.error.expected == "release/X.Y.Z"


def test_extract_version_escapes_prefix() -> None:
    assert isinstance(extract_version("rel.1.0.0", "rel."), Ok)
    assert isinstance(extract_version("relx1.0.0", "rel."), Err)


def test_tag_name() -> None:
    assert tag_name("release/2.3.0", "release/", "v") == "v2.3.0"
    assert tag_name("release/2.3.0", "release/", "") == "2.3.0"


class TestPatchManifest:
    def test_sets_version_and_keeps_other_fields(self) -> None:
        content = json.dumps({"name": "widgets", "version": "0.0.1", "private": True})
        result = patch_manifest_version(content, Version(1, 2, 0))
        assert isinstance(result, Ok)
        data = json.loads(result.value)
        assert data == {"name": "widgets", "version": "1.2.0", "private": True}
        assert result.value.startswith('{\n  "name"')

    def test_idempotent(self) -> None:
        once = patch_manifest_version('{"version": "0.1.0"}', Version(1, 0, 0))
        assert isinstance(once, Ok)
        twice = patch_manifest_version(once.value, Version(1, 0, 0))
        assert twice == once

    def test_invalid_json(self) -> None:
        result = patch_manifest_version("{nope", Version(1, 0, 0))
        assert isinstance(result, Err)
        assert result.error.path == "package.json"

    def test_root_must_be_object(self) -> None:
        assert isinstance(patch_manifest_version("[1, 2]", Version(1, 0, 0)), Err)


class TestPatchDescriptor:
    def test_rewrites_first_version_line(self) -> None:
        content = "_schema-version: '3.1'\nID: widgets\nversion: 0.0.1\nmodules:\n  - version: x\n"
        patched = patch_descriptor_version(content, Version(2, 0, 0))
        assert "\nversion: 2.0.0\n" in patched
        assert "  - version: x" in patched

    def test_no_version_line_is_unchanged(self) -> None:
        content = "ID: widgets\n"
        assert patch_descriptor_version(content, Version(1, 0, 0)) == content

    def test_idempotent(self) -> None:
        content = "ID: widgets\nversion: 0.0.1\n"
        once = patch_descriptor_version(content, Version(3, 1, 4))
        assert patch_descriptor_version(once, Version(3, 1, 4)) == once

    def test_crlf_line_ending_is_kept(self) -> None:
        content = "ID: widgets\r\nversion: 0.0.1\r\nmodules: []\r\n"
        patched = patch_descriptor_version(content, Version(1, 2, 0))
        assert patched == "ID: widgets\r\nversion: 1.2.0\r\nmodules: []\r\n"
