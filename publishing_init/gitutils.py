from __future__ import annotations

import logging
from pathlib import Path

from .commands import CommandRunner


def repo_url(host: str, org: str, name: str) -> str:
    return f"https://{host}/{org}/{name}"


def clone_repo(runner: CommandRunner, url: str, *, cwd: Path | None = None) -> None:
    runner.run(["git", "clone", url], cwd=cwd)


def set_remote_url(runner: CommandRunner, repo: Path, url: str, *, remote: str = "origin") -> None:
    runner.run(["git", "remote", "set-url", remote, url], cwd=repo)


def set_config(runner: CommandRunner, repo: Path, key: str, value: str) -> None:
    runner.run(["git", "config", key, value], cwd=repo)


def checkout(runner: CommandRunner, repo: Path, revision: str) -> None:
    runner.run(["git", "checkout", revision], cwd=repo)


def remove_index_lock(repo: Path) -> None:
    lock = repo / ".git" / "index.lock"
    try:
        lock.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logging.warning("Failed to remove stale lock %s: %s", lock, exc)
        return
    logging.info("Removed stale lock %s", lock)
