"""Tests for gitflow.core.config module."""

from __future__ import annotations

from pathlib import Path

from gitflow.core.config import GitFlowConfig, load_config
from gitflow.core.result import Err, Ok


class TestDefaults:
    def test_branch_and_prefix_defaults(self) -> None:
        config = GitFlowConfig()
        assert config.branches.main == "main"
        assert config.branches.development == "development"
        assert config.branches.quality == "quality"
        assert config.prefixes.release == "release/"
        assert config.prefixes.tag == "v"

    def test_owner_from_repository(self) -> None:
        config = GitFlowConfig().with_env({"GITHUB_REPOSITORY": "acme/widgets"})
        assert config.repository == "acme/widgets"
        assert config.owner == "acme"


class TestLoadConfig:
    def test_env_only(self) -> None:
        result = load_config(None, {"GITHUB_REPOSITORY": "acme/widgets"})
        assert isinstance(result, Ok)
        assert result.value.prefixes.feature == "feature/"

    def test_missing_repository_is_error(self) -> None:
        result = load_config(None, {})
        assert isinstance(result, Err)
        assert "repository" in result.error.message

    def test_toml_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "gitflow.toml"
        path.write_text(
            '[branches]\nmain = "master"\n\n[prefixes]\nrelease = "rel/"\ntag = ""\n',
            encoding="utf-8",
        )
        result = load_config(path, {"GITHUB_REPOSITORY": "acme/widgets"})
        assert isinstance(result, Ok)
        assert result.value.branches.main == "master"
        assert result.value.branches.development == "development"
        assert result.value.prefixes.release == "rel/"
        assert result.value.prefixes.tag == ""

    def test_env_inputs_override_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "gitflow.toml"
        path.write_text('[branches]\nmain = "master"\n', encoding="utf-8")
        env = {
            "GITHUB_REPOSITORY": "acme/widgets",
            "INPUT_MASTER_BRANCH": "production",
            "INPUT_RELEASE_BRANCH_PREFIX": "releases/",
        }
        result = load_config(path, env)
        assert isinstance(result, Ok)
        assert result.value.branches.main == "production"
        assert result.value.prefixes.release == "releases/"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "gitflow.toml"
        path.write_text("[branches\n", encoding="utf-8")
        result = load_config(path, {"GITHUB_REPOSITORY": "acme/widgets"})
        assert isinstance(result, Err)
        assert result.error.path == path

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml", {"GITHUB_REPOSITORY": "acme/widgets"})
        assert isinstance(result, Err)
        assert "not found" in result.error.message
