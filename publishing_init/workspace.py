from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path


class InitRepoError(Exception):
    """Base exception for bootstrap failures."""


@dataclass(frozen=True)
class Layout:
    root: Path
    base_package: str

    @property
    def base_repo_path(self) -> Path:
        return self.root / "src" / self.base_package

    @property
    def go_link(self) -> Path:
        return self.root / "go"

    def go_dir(self, version: str) -> Path:
        return self.root / f"go-{version}"

    def repo_dir(self, name: str) -> Path:
        return self.base_repo_path / name

    def gopath_src(self, import_path: str) -> Path:
        return self.root / "src" / import_path


def ensure_base_repo_path(layout: Layout, *, dry_run: bool = False) -> Path:
    path = layout.base_repo_path
    if path.exists():
        if not path.is_dir():
            raise InitRepoError(f"Existing source repo directory is not a directory: {path}")
        logging.debug("Reusing existing source repo directory at %s", path)
        return path
    if dry_run:
        logging.info("Dry run: would create source repo directory %s", path)
        return path
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InitRepoError(f"Failed to create source repo directory {path}: {exc}") from exc
    return path
