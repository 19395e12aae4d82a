"""
Version sync -- git bookkeeping for the store.

Every entry mutation becomes exactly one commit. The message
templates are fixed so history stays compatible with stores managed
by QtPass (including its stray quote on "Add" messages).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import CIPHERTEXT_SUFFIX, CommandResult, JobKind, StoreConfig

logger = logging.getLogger("skpass.vcs")


def entry_name(store_root: Path, path: Path) -> str:
    """Store-relative name of ``path`` with the ciphertext suffix stripped."""
    rel = Path(os.path.relpath(str(path), str(store_root))).as_posix()
    if rel.endswith(CIPHERTEXT_SUFFIX):
        rel = rel[: -len(CIPHERTEXT_SUFFIX)]
    return rel


def insert_message(name: str, overwrite: bool) -> str:
    return ("Edit" if overwrite else '"Add') + f" for {name} using QtPass."


def edit_message(name: str) -> str:
    return f"Edit for {name} using QtPass."


def remove_message(name: str) -> str:
    return f"Remove for {name} using QtPass."


def added_message(path: str) -> str:
    return f"Added {path} using QtPass."


class VersionSync:
    """Thin git command sequencing over a CommandRunner.

    Async methods return job ids; ``*_blocking`` methods return the
    CommandResult and are meant for the re-encryption walk.
    """

    def __init__(self, runner, config: StoreConfig):
        self.runner = runner
        self.config = config

    @property
    def git(self) -> str:
        return self.config.git_executable

    def init(self) -> int:
        return self.runner.run_async(
            JobKind.GIT_INIT, self.git, ["init", str(self.config.store_root)]
        )

    def pull(self) -> int:
        return self.runner.run_async(JobKind.GIT_PULL, self.git, ["pull"])

    def push(self) -> int:
        return self.runner.run_async(JobKind.GIT_PUSH, self.git, ["push"])

    def add(self, path: Path) -> int:
        return self.runner.run_async(JobKind.GIT_ADD, self.git, ["add", str(path)])

    def commit(self, path: Path, message: str) -> int:
        return self.runner.run_async(
            JobKind.GIT_COMMIT, self.git, ["commit", "-m", message, "--", str(path)]
        )

    def remove(self, path: Path, recursive: bool = False) -> int:
        return self.runner.run_async(
            JobKind.GIT_RM, self.git, ["rm", "-rf" if recursive else "-f", str(path)]
        )

    def pull_blocking(self) -> CommandResult:
        return self._blocking(["pull"])

    def push_blocking(self) -> CommandResult:
        return self._blocking(["push"])

    def add_blocking(self, path: Path) -> CommandResult:
        return self._blocking(["add", str(path)])

    def commit_blocking(self, path: Path, message: str) -> CommandResult:
        return self._blocking(["commit", str(path), "-m", message])

    def _blocking(self, args: list[str]) -> CommandResult:
        result = self.runner.run_blocking(self.git, args)
        if not result.ok:
            logger.warning(
                "git %s exited %d: %s", args[0], result.exit_code, result.stderr.strip()
            )
        return result
