from __future__ import annotations

from pathlib import Path

import pytest

from publishing_init.rules import BranchRule, RepositoryRule, RulesError, load_rules
from publishing_init.toolchain import collect_go_versions


def write_rules(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(text)
    return path


def test_load_rules_parses_destinations_and_go_versions(tmp_path: Path) -> None:
    path = write_rules(
        tmp_path,
        "rules:\n"
        "- destination: widgets-fork\n"
        "  branches:\n"
        "  - name: master\n"
        "    go: 1.12.0\n"
        "    source:\n"
        "      branch: master\n"
        "      dir: staging/src/widgets\n"
        "  - name: release-1.0\n"
        "- destination: gadgets\n",
    )

    rules = load_rules(path)

    assert rules.destinations() == ["widgets-fork", "gadgets"]
    assert rules.rules[0] == RepositoryRule(
        destination="widgets-fork",
        branches=(BranchRule(name="master", go_version="1.12.0"), BranchRule(name="release-1.0")),
    )
    assert rules.rules[1].branches == ()


def test_load_rules_keeps_go_version_text(tmp_path: Path) -> None:
    path = write_rules(
        tmp_path,
        "rules:\n"
        "- destination: widgets\n"
        "  branches:\n"
        "  - name: release-1.10\n"
        "    go: 1.10\n"
        "  - name: release-1.20\n"
        "    go: 1.20\n"
        "  - name: master\n"
        "    go: ~\n"
        "- destination: gadgets\n"
        "  branches:\n"
        "  - name: master\n"
        "    go: 1.10\n",
    )

    rules = load_rules(path)

    assert [branch.go_version for branch in rules.rules[0].branches] == ["1.10", "1.20", ""]
    assert collect_go_versions(rules)[1:] == ["1.10", "1.20"]


def test_load_rules_null_branches(tmp_path: Path) -> None:
    rules = load_rules(write_rules(tmp_path, "rules:\n- destination: widgets\n  branches: ~\n"))

    assert rules.rules[0].branches == ()


def test_load_rules_empty_document(tmp_path: Path) -> None:
    assert load_rules(write_rules(tmp_path, "")).rules == ()


def test_load_rules_missing_file(tmp_path: Path) -> None:
    with pytest.raises(RulesError, match="Failed to load rules"):
        load_rules(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "text, message",
    [
        ("- destination: widgets\n", "expected a mapping"),
        ("rules: widgets\n", "'rules' must be a list"),
        ("rules:\n- widgets\n", "Invalid rule at index 0"),
        ("rules:\n- branches: []\n", "missing 'destination'"),
        ("rules:\n- destination: widgets\n  branches: master\n", "'branches' must be a list"),
        ("rules:\n- destination: widgets\n  branches:\n  - master\n", "Invalid branch at index 0"),
        ("rules: [unterminated\n", "Failed to parse rules"),
    ],
)
def test_load_rules_rejects_invalid_documents(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(RulesError, match=message):
        load_rules(write_rules(tmp_path, text))
