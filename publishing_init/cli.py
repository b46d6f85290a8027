from __future__ import annotations

import argparse
import logging
import os
from collections import Counter
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .commands import CommandRunner
from .config import Config, default_gopath, load_config, resolve_config
from .repos import clone_fork_repo, clone_source_repo
from .rules import load_rules
from .toolchain import install_toolchains
from .tools import DEP, GODEP, ensure_tool
from .workspace import InitRepoError, ensure_base_repo_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="publishing-init",
        description=(
            "Prepare Go toolchains, dependency managers and repository clones "
            "for the publishing bot. Command line flags override config values."
        ),
    )
    parser.add_argument("--config", type=Path, help="The config file in yaml format.")
    parser.add_argument(
        "--github-host",
        default="",
        help="The address of github (defaults to github.com).",
    )
    parser.add_argument(
        "--base-package",
        default="",
        help=(
            "The name of the package base (defaults to k8s.io when source repo is "
            "kubernetes, otherwise github-host/target-org)."
        ),
    )
    parser.add_argument(
        "--source-repo",
        default="",
        help="The name of the source repository (eg. kubernetes).",
    )
    parser.add_argument(
        "--source-org",
        default="",
        help="The name of the source repository organization (eg. kubernetes).",
    )
    parser.add_argument("--rules-file", default="", help="The file with repository rules.")
    parser.add_argument(
        "--target-org",
        default="",
        help='The target organization to publish into (e.g. "k8s-publishing-bot").',
    )
    parser.add_argument(
        "--skip-godep",
        action="store_true",
        help="Skip godep installation and run godep-restore on a fresh source clone.",
    )
    parser.add_argument("--skip-dep", action="store_true", help="Skip dep installation.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Describe the actions without running commands or mutating the filesystem.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def run(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> int:
    configure_logging(args.verbose)
    logging.debug("Arguments: %s", args)
    environ = os.environ if environ is None else environ
    _run_init_flow(args, environ)
    return 0


def _run_init_flow(args: argparse.Namespace, environ: Mapping[str, str]) -> None:
    config = load_config(args.config) if args.config else Config()
    overrides = {
        "target_org": args.target_org,
        "source_repo": args.source_repo,
        "source_org": args.source_org,
        "github_host": args.github_host,
        "base_package": args.base_package,
        "rules_file": args.rules_file,
    }
    config, layout = resolve_config(
        config, overrides, gopath=default_gopath(environ), environ=environ
    )
    logging.info("GOPATH: %s", layout.root)
    logging.info("Base repository path: %s", layout.base_repo_path)

    rules = load_rules(Path(config.rules_file))
    logging.info("Loaded %d rule(s) from %s", len(rules.rules), config.rules_file)

    runner = CommandRunner(layout.base_repo_path, dry_run=args.dry_run)
    stats: Counter[str] = Counter()

    for status, count in install_toolchains(rules, layout, runner).items():
        stats[f"go-{status}"] += count

    ensure_base_repo_path(layout, dry_run=args.dry_run)

    for tool, skipped in ((GODEP, args.skip_godep), (DEP, args.skip_dep)):
        if skipped:
            logging.info("Skipping %s installation", tool.name)
            stats["tool-skipped"] += 1
            continue
        stats[f"tool-{ensure_tool(tool, layout, runner)}"] += 1

    source_status = clone_source_repo(
        config, layout, runner, restore_vendored=args.skip_godep
    )
    stats[f"repo-{source_status}"] += 1

    for destination in rules.destinations():
        stats[f"repo-{clone_fork_repo(config, layout, runner, destination, environ)}"] += 1

    _log_init_summary(stats, dry_run=args.dry_run)


def _log_init_summary(stats: Counter[str], *, dry_run: bool) -> None:
    title = "Init Summary (dry-run)" if dry_run else "Init Summary"
    categories = [
        ("Go installed", stats.get("go-installed", 0), "toolchain versions downloaded"),
        ("Go existing", stats.get("go-existing", 0), "toolchain versions already present"),
        ("Tools installed", stats.get("tool-installed", 0), "dependency managers built"),
        ("Tools existing", stats.get("tool-existing", 0), "dependency managers already on PATH"),
        ("Tools skipped", stats.get("tool-skipped", 0), "disabled by flags"),
        ("Repos cloned", stats.get("repo-cloned", 0), "fresh clones"),
        ("Repos refreshed", stats.get("repo-refreshed", 0), "fork remotes reset"),
        ("Repos existing", stats.get("repo-existing", 0), "source repository already cloned"),
    ]

    lines = ["", title, "-" * len(title)]
    width = max(len(label) for label, _, _ in categories)
    for label, value, description in categories:
        lines.append(f"{label:<{width}} : {value} ({description})")
    logging.info("\n".join(lines))


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except InitRepoError as exc:
        logging.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logging.error("Interrupted")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
