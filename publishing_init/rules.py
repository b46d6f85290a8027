"""
Loader for the publishing rules document.

Only the parts needed to prepare the environment are read: each rule's
destination repository and the Go version required by its branches.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Tuple

import yaml

from .config import parse_yaml, scalar_text
from .workspace import InitRepoError


class RulesError(InitRepoError):
    """Raised when the rules document cannot be loaded."""


@dataclass(frozen=True)
class BranchRule:
    name: str
    go_version: str = ""


@dataclass(frozen=True)
class RepositoryRule:
    destination: str
    branches: Tuple[BranchRule, ...] = ()


@dataclass(frozen=True)
class RepositoryRules:
    rules: Tuple[RepositoryRule, ...] = ()

    def destinations(self) -> list[str]:
        return [rule.destination for rule in self.rules]


def load_rules(path: Path) -> RepositoryRules:
    path = Path(path).expanduser()
    try:
        text = path.read_text()
    except OSError as exc:
        raise RulesError(f"Failed to load rules from {path}: {exc}") from exc
    try:
        data = parse_yaml(text)
    except yaml.YAMLError as exc:
        raise RulesError(f"Failed to parse rules at {path}: {exc}") from exc

    if data is None:
        return RepositoryRules()
    if not isinstance(data, dict):
        raise RulesError(
            f"Invalid rules format in {path}: expected a mapping, got {type(data).__name__}"
        )

    raw_rules = _sequence(data.get("rules"))
    if not isinstance(raw_rules, list):
        raise RulesError(
            f"Invalid rules format in {path}: 'rules' must be a list, got {type(raw_rules).__name__}"
        )

    return RepositoryRules(
        rules=tuple(_parse_rule(path, index, entry) for index, entry in enumerate(raw_rules))
    )


def _parse_rule(path: Path, index: int, entry: Any) -> RepositoryRule:
    if not isinstance(entry, dict):
        raise RulesError(
            f"Invalid rule at index {index} in {path}: expected a mapping, got {type(entry).__name__}"
        )
    destination = scalar_text(entry.get("destination"))
    if not destination:
        raise RulesError(f"Invalid rule at index {index} in {path}: missing 'destination'")

    raw_branches = _sequence(entry.get("branches"))
    if not isinstance(raw_branches, list):
        raise RulesError(
            f"Invalid rule '{destination}' in {path}: 'branches' must be a list"
        )

    branches = []
    for branch_index, branch in enumerate(raw_branches):
        if not isinstance(branch, dict):
            raise RulesError(
                f"Invalid branch at index {branch_index} of rule '{destination}' in {path}: "
                f"expected a mapping, got {type(branch).__name__}"
            )
        branches.append(
            BranchRule(
                name=scalar_text(branch.get("name")),
                go_version=scalar_text(branch.get("go")),
            )
        )
    return RepositoryRule(destination=destination, branches=tuple(branches))


def _sequence(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not scalar_text(value)):
        return []
    return value
