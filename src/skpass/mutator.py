"""
Entry mutations -- insert, show, remove, and store initialization.

These are the user-facing actions. gpg and git calls are dispatched
asynchronously; the caller collects completions from the runner by
job id. Only store initialization blocks, because it finishes with a
re-encryption walk.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .errors import AccessControlMissing, NoSecretKeyAvailable, StoreError
from .gpg import decrypt_args, encrypt_args
from .models import (
    CIPHERTEXT_SUFFIX,
    GPG_ID_FILE,
    CommandResult,
    JobKind,
    ReencryptReport,
    StoreConfig,
    UserInfo,
)
from .vcs import added_message, entry_name, insert_message, remove_message

logger = logging.getLogger("skpass.mutator")


class EntryMutator:
    """Direct secret lifecycle operations on a password store.

    Args:
        config: Store configuration.
        runner: CommandRunner.
        resolver: AccessControlResolver.
        vcs: VersionSync.
        engine: ReencryptionEngine, run after store initialization.
    """

    def __init__(self, config: StoreConfig, runner, resolver, vcs, engine):
        self.config = config
        self.runner = runner
        self.resolver = resolver
        self.vcs = vcs
        self.engine = engine

    @property
    def store_root(self) -> Path:
        return self.config.store_root

    def entry_path(self, path: str) -> Path:
        """Filesystem path of an entry or directory, without suffix."""
        return self.store_root / path.strip("/")

    def ciphertext_path(self, path: str) -> Path:
        """Filesystem path of an entry's ciphertext."""
        return self.store_root / (path.strip("/") + CIPHERTEXT_SUFFIX)

    def insert(self, path: str, plaintext: str, overwrite: bool = False) -> int:
        """Encrypt ``plaintext`` into the entry at ``path``.

        Args:
            path: Store-relative entry name, without suffix.
            plaintext: Secret content, fed to gpg on stdin.
            overwrite: Replace an existing entry.

        Returns:
            Job id of the encrypt job.

        Raises:
            AccessControlMissing: No usable .gpg-id covers ``path``.
                Nothing is spawned in that case.
        """
        target = self.ciphertext_path(path)
        recipients = sorted(self.resolver.recipients(target))
        if not recipients:
            raise AccessControlMissing(path)

        job_id = self.runner.run_async(
            JobKind.PASS_INSERT,
            self.config.gpg_executable,
            encrypt_args(target, recipients, overwrite=overwrite),
            input=plaintext,
        )

        if self.config.commits_enabled:
            if not overwrite:
                self.vcs.add(target)
            name = entry_name(self.store_root, target)
            self.vcs.commit(target, insert_message(name, overwrite))
        return job_id

    def show(self, path: str) -> int:
        """Decrypt an entry asynchronously; the plaintext arrives as stdout."""
        return self.runner.run_async(
            JobKind.PASS_SHOW,
            self.config.gpg_executable,
            decrypt_args(self.ciphertext_path(path)),
        )

    def show_blocking(self, path: str) -> CommandResult:
        """Decrypt an entry and wait for the result."""
        return self.runner.run_blocking(
            self.config.gpg_executable, decrypt_args(self.ciphertext_path(path))
        )

    def remove(self, path: str, is_dir: bool = False) -> Optional[int]:
        """Delete an entry, or a whole subtree when ``is_dir``.

        With git active the removal goes through ``git rm`` and a commit
        (returns the commit job id). Otherwise the files are deleted
        directly and None is returned.
        """
        target = self.entry_path(path) if is_dir else self.ciphertext_path(path)

        if self.config.use_git:
            self.vcs.remove(target, recursive=is_dir)
            name = entry_name(self.store_root, target)
            return self.vcs.commit(target, remove_message(name))

        if not target.exists():
            logger.warning("Nothing to remove at %s", target)
            return None
        if is_dir:
            shutil.rmtree(target)
        else:
            target.unlink()
        logger.info("Removed %s", target)
        return None

    def initialize_store(self, root: Path, users: list[UserInfo]) -> ReencryptReport:
        """Declare the recipients of ``root`` and converge its entries.

        Writes ``root/.gpg-id`` with every enabled user's key id, then
        checks that at least one of them has a secret key. The file is
        written before that check and is left in place when it fails.

        Args:
            root: Directory to declare, absolute or store-relative.
            users: Candidate recipients; only enabled ones are written.

        Returns:
            ReencryptReport of the walk over ``root``.

        Raises:
            StoreError: The declaration could not be written.
            NoSecretKeyAvailable: No enabled user has a secret key.
        """
        root = Path(root)
        if not root.is_absolute():
            root = self.store_root / root
        gpg_id = root / GPG_ID_FILE

        add_file = self.config.add_gpg_id and not gpg_id.is_file()

        enabled = [u for u in users if u.enabled]
        try:
            root.mkdir(parents=True, exist_ok=True)
            gpg_id.write_text("".join(f"{u.key_id}\n" for u in enabled), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Failed to open {GPG_ID_FILE} for writing: {exc}") from exc

        if not any(u.have_secret for u in enabled):
            logger.error("No secret key among %s", [u.key_id for u in enabled])
            raise NoSecretKeyAvailable(str(gpg_id))

        if self.config.commits_enabled and self.config.git_executable:
            if add_file:
                self.vcs.add(gpg_id)
            commit_id = self.vcs.commit(gpg_id, added_message(str(gpg_id)))
            self.runner.wait(commit_id)

        return self.engine.reencrypt_path(root)
