from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from publishing_init.commands import CommandRunner


class RecordingRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them."""

    def __init__(
        self,
        default_cwd: Path,
        *,
        dry_run: bool = False,
        effect: Optional[Callable[[Sequence[str], Path], None]] = None,
    ) -> None:
        super().__init__(default_cwd, dry_run=dry_run)
        self.calls: List[Tuple[List[str], Path]] = []
        self.effect = effect

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> None:
        workdir = cwd if cwd is not None else self.default_cwd
        self.calls.append((list(args), workdir))
        if self.effect is not None:
            self.effect(args, workdir)

    @property
    def commands(self) -> List[List[str]]:
        return [args for args, _ in self.calls]


@pytest.fixture
def recording_runner(tmp_path: Path) -> RecordingRunner:
    return RecordingRunner(tmp_path / "src" / "github.com" / "acme-pub")
