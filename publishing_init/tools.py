from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass

from .commands import CommandRunner
from .gitutils import checkout
from .workspace import Layout


@dataclass(frozen=True)
class PinnedTool:
    """An executable built from source at a fixed revision when missing."""

    name: str
    import_path: str
    revision: str
    build_target: str


GODEP = PinnedTool(
    name="godep",
    import_path="github.com/tools/godep",
    revision="tags/v80",
    build_target="./...",
)
DEP = PinnedTool(
    name="dep",
    import_path="github.com/golang/dep",
    revision="7c44971bbb9f0ed87db40b601f2d9fe4dffb750d",
    build_target="./cmd/dep",
)


def ensure_tool(tool: PinnedTool, layout: Layout, runner: CommandRunner) -> str:
    if shutil.which(tool.name):
        logging.info("Already installed: %s", tool.name)
        return "existing"

    logging.info("Installing %s#%s ...", tool.import_path, tool.revision)
    runner.run(["go", "get", tool.import_path])

    source_dir = layout.gopath_src(tool.import_path)
    checkout(runner, source_dir, tool.revision)
    runner.run(["go", "install", tool.build_target], cwd=source_dir)
    return "installed"
