"""Typed configuration loading and access.

Configuration is resolved once per run from three sources, lowest precedence
first:

1. Built-in defaults (the conventional git-flow names).
2. An optional ``gitflow.toml`` with ``[branches]`` and ``[prefixes]`` tables.
3. GitHub Action inputs exposed as ``INPUT_*`` environment variables, plus
   ``GITHUB_REPOSITORY`` for the repository slug.

Example ``gitflow.toml``::

    repository = "acme/widgets"

    [branches]
    main = "master"
    development = "develop"

    [prefixes]
    release = "release/"
    tag = "v"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "BranchesConfig",
    "ConfigError",
    "GitFlowConfig",
    "PrefixesConfig",
    "load_config",
]

# Action input name -> (section, key)
_INPUTS: dict[str, tuple[str, str]] = {
    "MASTER_BRANCH": ("branches", "main"),
    "DEVELOPMENT_BRANCH": ("branches", "development"),
    "QUALITY_BRANCH": ("branches", "quality"),
    "FEATURE_BRANCH_PREFIX": ("prefixes", "feature"),
    "BUGFIX_BRANCH_PREFIX": ("prefixes", "bugfix"),
    "HOTFIX_BRANCH_PREFIX": ("prefixes", "hotfix"),
    "RELEASE_BRANCH_PREFIX": ("prefixes", "release"),
    "SUPPORT_BRANCH_PREFIX": ("prefixes", "support"),
    "TAG_PREFIX": ("prefixes", "tag"),
}


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or is incomplete."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BranchesConfig:
    """Long-lived branch names."""

    main: str = "main"
    development: str = "development"
    quality: str = "quality"


@dataclass(frozen=True, slots=True)
class PrefixesConfig:
    """Branch naming prefixes and the tag prefix."""

    feature: str = "feature/"
    bugfix: str = "bugfix/"
    hotfix: str = "hotfix/"
    release: str = "release/"
    support: str = "support/"
    tag: str = "v"


@dataclass(frozen=True, slots=True)
class GitFlowConfig:
    """Main configuration container."""

    repository: str | None = None  # owner/name
    branches: BranchesConfig = field(default_factory=BranchesConfig)
    prefixes: PrefixesConfig = field(default_factory=PrefixesConfig)

    @property
    def owner(self) -> str | None:
        if self.repository is None or "/" not in self.repository:
            return None
        return self.repository.split("/", 1)[0]

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GitFlowConfig:
        """Create a config from a mapping (parsed TOML), falling back to defaults."""
        branches: StrDict = get_table(data, "branches") or {}
        prefixes: StrDict = get_table(data, "prefixes") or {}
        b = BranchesConfig()
        p = PrefixesConfig()

        return cls(
            repository=get_str(data, "repository"),
            branches=BranchesConfig(
                main=get_str(branches, "main") or b.main,
                development=get_str(branches, "development") or b.development,
                quality=get_str(branches, "quality") or b.quality,
            ),
            prefixes=PrefixesConfig(
                feature=_prefix(prefixes, "feature", p.feature),
                bugfix=_prefix(prefixes, "bugfix", p.bugfix),
                hotfix=_prefix(prefixes, "hotfix", p.hotfix),
                release=_prefix(prefixes, "release", p.release),
                support=_prefix(prefixes, "support", p.support),
                tag=_prefix(prefixes, "tag", p.tag),
            ),
        )

    def with_env(self, env: Mapping[str, str]) -> GitFlowConfig:
        """Overlay GitHub Action inputs and ``GITHUB_REPOSITORY``."""
        branches: dict[str, str] = {}
        prefixes: dict[str, str] = {}
        for name, (section, key) in _INPUTS.items():
            value = env.get(f"INPUT_{name}")
            if value is None or not value.strip():
                continue
            target = branches if section == "branches" else prefixes
            target[key] = value.strip()

        repository = env.get("GITHUB_REPOSITORY", "").strip() or self.repository
        return replace(
            self,
            repository=repository,
            branches=replace(self.branches, **branches),
            prefixes=replace(self.prefixes, **prefixes),
        )


def _prefix(table: Mapping[str, object], key: str, default: str) -> str:
    # Prefixes are matched literally, so keep trailing separators but drop
    # surrounding whitespace; an explicit empty string disables the prefix.
    value = table.get(key)
    if not isinstance(value, str):
        return default
    return value.strip()


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(
    path: Path | None,
    env: Mapping[str, str],
) -> Result[GitFlowConfig, ConfigError]:
    """Resolve the run configuration.

    Args:
        path: Optional path to ``gitflow.toml``. A missing file is an error
            only when the path was given explicitly.
        env: Process environment (``os.environ`` in production).

    Returns:
        Ok(GitFlowConfig) on success, Err(ConfigError) when the file is
        unreadable or no repository slug can be determined.
    """
    config = GitFlowConfig()
    if path is not None:
        data = _parse_toml(path)
        if isinstance(data, Err):
            return data
        config = GitFlowConfig.from_dict(data.value)

    config = config.with_env(env)
    if config.owner is None:
        return Err(
            ConfigError(
                "repository is not set (expected GITHUB_REPOSITORY=owner/name)",
                path=path,
            )
        )
    return Ok(config)
