from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from .commands import CommandRunner
from .config import Config
from .gitutils import clone_repo, remove_index_lock, repo_url, set_config, set_remote_url
from .workspace import Layout

RESTORE_SCRIPT = "hack/godep-restore.sh"
COMMITTER_NAME_ENV = "GIT_COMMITTER_NAME"
COMMITTER_EMAIL_ENV = "GIT_COMMITTER_EMAIL"


def clone_source_repo(
    config: Config,
    layout: Layout,
    runner: CommandRunner,
    *,
    restore_vendored: bool,
) -> str:
    repo_dir = layout.repo_dir(config.source_repo)
    if repo_dir.exists():
        logging.info("Source repository %r already cloned, skipping", config.source_repo)
        return "existing"

    url = repo_url(config.github_host, config.source_org, config.source_repo)
    logging.info("Cloning source repository %s ...", url)
    clone_repo(runner, url)

    if restore_vendored:
        logging.info("Running %s ...", RESTORE_SCRIPT)
        runner.run(["bash", "-x", RESTORE_SCRIPT], cwd=repo_dir)
    return "cloned"


def clone_fork_repo(
    config: Config,
    layout: Layout,
    runner: CommandRunner,
    repo_name: str,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Clone a destination repository, or point an existing clone at the target org.

    Commit identity is only configured on a fresh clone.
    """
    environ = os.environ if environ is None else environ
    url = repo_url(config.github_host, config.target_org, repo_name)
    repo_dir = layout.repo_dir(repo_name)

    if repo_dir.exists():
        logging.info(
            "Fork repository %r already cloned to %s, resetting remote URL ...", repo_name, repo_dir
        )
        set_remote_url(runner, repo_dir, url)
        if runner.dry_run:
            logging.info("Dry run: would remove stale lock in %s", repo_dir)
        else:
            remove_index_lock(repo_dir)
        return "refreshed"

    logging.info("Cloning fork repository %s ...", url)
    clone_repo(runner, url)
    set_config(runner, repo_dir, "user.name", environ.get(COMMITTER_NAME_ENV, ""))
    set_config(runner, repo_dir, "user.email", environ.get(COMMITTER_EMAIL_ENV, ""))
    return "cloned"
