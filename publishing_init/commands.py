from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Sequence

from .workspace import InitRepoError


class CommandError(InitRepoError):
    def __init__(self, message: str, args: Sequence[str], returncode: int | None = None) -> None:
        super().__init__(message)
        self.command = list(args)
        self.returncode = returncode


class CommandRunner:
    """Runs external commands one at a time, streaming their output.

    Commands without an explicit working directory run in ``default_cwd``.
    Any launch failure or non-zero exit raises :class:`CommandError`.
    """

    def __init__(self, default_cwd: Path, *, dry_run: bool = False) -> None:
        self.default_cwd = default_cwd
        self.dry_run = dry_run

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> None:
        workdir = cwd if cwd is not None else self.default_cwd
        command_line = shlex.join(args)
        if self.dry_run:
            logging.info("Dry run: would run %r in %s", command_line, workdir)
            return
        logging.debug("Running %r in %s", command_line, workdir)
        try:
            result = subprocess.run(list(args), cwd=workdir)
        except OSError as exc:
            raise CommandError(f"Command {command_line!r} failed to start: {exc}", args) from exc
        if result.returncode != 0:
            raise CommandError(
                f"Command {command_line!r} failed with exit code {result.returncode}",
                args,
                result.returncode,
            )
