from __future__ import annotations

import logging
import os
import shlex
import shutil
import stat
import tempfile
from collections import Counter
from pathlib import Path
from typing import List

from .commands import CommandRunner
from .rules import RepositoryRules
from .workspace import InitRepoError, Layout

DEFAULT_GO_VERSION = "1.10.2"
GO_ARCHIVE_URL = "https://storage.googleapis.com/golang/go{version}.linux-amd64.tar.gz"


class ToolchainError(InitRepoError):
    """Raised when a Go distribution cannot be installed or linked."""


def collect_go_versions(rules: RepositoryRules, default: str = DEFAULT_GO_VERSION) -> List[str]:
    versions: List[str] = [default]
    for rule in rules.rules:
        for branch in rule.branches:
            if branch.go_version and branch.go_version not in versions:
                versions.append(branch.go_version)
    return versions


def go_archive_url(version: str) -> str:
    return GO_ARCHIVE_URL.format(version=version)


def install_go_version(version: str, layout: Layout, runner: CommandRunner) -> str:
    target = layout.go_dir(version)
    try:
        mode = target.stat().st_mode
    except FileNotFoundError:
        mode = None
    except OSError as exc:
        raise ToolchainError(f"Failed to inspect {target}: {exc}") from exc
    if mode is not None:
        if stat.S_ISDIR(mode):
            logging.info("Found existing go %s at %s", version, target)
            return "existing"
        raise ToolchainError(f"Expected {target} to be a directory")

    logging.info("Installing go %s to %s", version, target)
    if runner.dry_run:
        logging.info("Dry run: would download %s", go_archive_url(version))
        return "installed"

    try:
        layout.root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix="go-tmp-", dir=layout.root))
    except OSError as exc:
        raise ToolchainError(f"Failed to create staging directory in {layout.root}: {exc}") from exc

    try:
        script = "set -o pipefail; curl -SLf {url} | tar -xz --strip 1 -C {dest}".format(
            url=shlex.quote(go_archive_url(version)),
            dest=shlex.quote(str(staging)),
        )
        runner.run(["/bin/bash", "-c", script], cwd=staging)
        try:
            os.rename(staging, target)
        except OSError as exc:
            raise ToolchainError(f"Failed to move {staging} to {target}: {exc}") from exc
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return "installed"


def link_default_go(layout: Layout, version: str = DEFAULT_GO_VERSION, *, dry_run: bool = False) -> Path:
    link = layout.go_link
    target = layout.go_dir(version)
    if dry_run:
        logging.info("Dry run: would link %s to %s", link, target)
        return link
    try:
        link.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logging.debug("Could not remove %s: %s", link, exc)
    try:
        link.symlink_to(target)
    except OSError as exc:
        raise ToolchainError(f"Failed to link {link} to {target}: {exc}") from exc
    logging.info("Linked %s to %s", link, target)
    return link


def install_toolchains(rules: RepositoryRules, layout: Layout, runner: CommandRunner) -> Counter[str]:
    stats: Counter[str] = Counter()
    for version in collect_go_versions(rules):
        stats[install_go_version(version, layout, runner)] += 1
    link_default_go(layout, DEFAULT_GO_VERSION, dry_run=runner.dry_run)
    return stats
