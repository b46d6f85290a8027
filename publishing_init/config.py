"""
Configuration resolution for publishing-init.

The config document is the same YAML file the publisher reads, so keys this
tool does not use are ignored. Command-line values win over the file whenever
they are non-empty.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from .workspace import InitRepoError, Layout

DEFAULT_GITHUB_HOST = "github.com"
KUBERNETES_REPO = "kubernetes"
KUBERNETES_BASE_PACKAGE = "k8s.io"
RULE_FILE_PATH_ENV = "RULE_FILE_PATH"
NULL_SCALARS = frozenset({"~", "null", "Null", "NULL"})


class ConfigError(InitRepoError):
    """Raised when the configuration cannot be loaded or is incomplete."""


@dataclass(frozen=True)
class Config:
    source_org: str = ""
    source_repo: str = ""
    target_org: str = ""
    github_host: str = ""
    base_package: str = ""
    rules_file: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Config":
        values = {}
        for field in fields(cls):
            key = field.name.replace("_", "-")
            value = scalar_text(data.get(key))
            if value:
                values[field.name] = value
        return cls(**values)


def parse_yaml(text: str) -> Any:
    """Parse YAML keeping every scalar as its source text.

    Version strings such as ``1.10`` must not be read as floats.
    """
    return yaml.load(text, Loader=yaml.BaseLoader)


def scalar_text(value: Any) -> str:
    if not isinstance(value, str) or value in NULL_SCALARS:
        return ""
    return value


def load_config(path: Path) -> Config:
    path = path.expanduser()
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Failed to load config file from {path}: {exc}") from exc
    try:
        data = parse_yaml(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file at {path}: {exc}") from exc
    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid config file at {path}: expected a mapping, got {type(data).__name__}"
        )
    return Config.from_dict(data)


def default_gopath(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    value = environ.get("GOPATH", "")
    if value:
        first = value.split(os.pathsep)[0]
        if first:
            return Path(first).expanduser()
    return Path.home() / "go"


def resolve_config(
    config: Config,
    overrides: Mapping[str, Optional[str]],
    *,
    gopath: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[Config, Layout]:
    """Merge flag overrides into ``config``, apply defaults and validate.

    Returns the resolved config together with the filesystem layout derived
    from it. Raises :class:`ConfigError` when a required value is missing.
    """
    environ = os.environ if environ is None else environ

    for name in ("target_org", "source_repo", "source_org", "github_host", "base_package"):
        value = overrides.get(name)
        if value:
            config = replace(config, **{name: value})

    if not config.github_host:
        config = replace(config, github_host=DEFAULT_GITHUB_HOST)
    if not config.base_package:
        config = replace(config, base_package=derive_base_package(config))

    layout = Layout(root=gopath, base_package=config.base_package)

    rules_override = overrides.get("rules_file")
    if rules_override:
        config = replace(config, rules_file=rules_override)

    if not config.source_repo or not config.source_org:
        raise ConfigError("source-org and source-repo cannot be empty")
    if not config.target_org:
        raise ConfigError("target organization cannot be empty")

    rule_file_path = environ.get(RULE_FILE_PATH_ENV, "")
    if rule_file_path:
        config = replace(
            config,
            rules_file=str(layout.repo_dir(config.source_repo) / rule_file_path),
        )

    if not config.rules_file:
        raise ConfigError("no rules file provided")

    return config, layout


def derive_base_package(config: Config) -> str:
    if config.source_repo == KUBERNETES_REPO:
        return KUBERNETES_BASE_PACKAGE
    return f"{config.github_host}/{config.target_org}"
