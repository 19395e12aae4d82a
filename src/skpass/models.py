"""
Pydantic models for the password store: configuration, command jobs,
key candidates, and re-encryption outcomes.

Configuration is frozen on purpose. Every component receives the same
StoreConfig at construction and nothing reads settings from globals.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

CIPHERTEXT_SUFFIX = ".gpg"
GPG_ID_FILE = ".gpg-id"
DECRYPT_FAILED = "Could not decrypt"


def _default_store_path() -> Path:
    return Path(os.environ.get("PASSWORD_STORE_DIR", "~/.password-store"))


class JobKind(str, Enum):
    """Category of an external command, used to label completions."""

    GIT_INIT = "git_init"
    GIT_PULL = "git_pull"
    GIT_PUSH = "git_push"
    GIT_ADD = "git_add"
    GIT_COMMIT = "git_commit"
    GIT_RM = "git_rm"
    PASS_SHOW = "show"
    PASS_INSERT = "insert"


class CommandJob(BaseModel):
    """A unit of work queued on the CommandRunner."""

    job_id: int
    kind: JobKind
    executable: str
    args: list[str] = Field(default_factory=list)
    input: Optional[str] = None
    read_stdout: bool = True
    read_stderr: bool = True


class CommandResult(BaseModel):
    """Exit status and captured streams of a finished process."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class JobResult(CommandResult):
    """Completion notification for an asynchronously dispatched job."""

    job_id: int
    kind: JobKind


class UserInfo(BaseModel):
    """A candidate recipient as reported by the GPG keyring."""

    key_id: str
    name: str = ""
    validity: str = ""
    enabled: bool = False
    have_secret: bool = False


class StoreConfig(BaseModel):
    """Immutable settings for one password store.

    Attributes:
        store_path: Root of the store (``~`` is expanded on use).
        gpg_executable: Encryption tool binary.
        git_executable: Version-control binary. Empty disables git init commits.
        use_git: Record every mutation as a git commit.
        use_webdav: Store is synced over WebDAV; git commits are skipped.
        auto_pull: Pull before a re-encryption walk.
        auto_push: Push after a re-encryption walk.
        add_gpg_id: Stage a newly created .gpg-id before committing it.
    """

    model_config = ConfigDict(frozen=True)

    store_path: Path = Field(default_factory=_default_store_path)
    gpg_executable: str = "gpg"
    git_executable: str = "git"
    use_git: bool = True
    use_webdav: bool = False
    auto_pull: bool = False
    auto_push: bool = False
    add_gpg_id: bool = True

    @property
    def store_root(self) -> Path:
        return self.store_path.expanduser()

    @property
    def commits_enabled(self) -> bool:
        """Whether entry mutations are followed by git add/commit."""
        return self.use_git and not self.use_webdav


class ReencryptReport(BaseModel):
    """What a re-encryption walk did."""

    root: Path
    scanned: int = 0
    reencrypted: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    commits: int = 0
    aborted: bool = False
