"""
publishing_init package

Provides the CLI entrypoint (`publishing-init`) that prepares Go toolchains,
dependency managers and repository clones for the publishing bot.
"""

from .cli import main

__all__ = ["main"]
