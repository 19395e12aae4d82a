"""
Re-encryption engine -- converge every entry to its declared recipients.

    reencrypt_path(dir)
        [git pull]                  if auto_pull, result only logged
        for each *.gpg, grouped by directory:
            actual   = gpg --list-only
            declared = nearest .gpg-id, sorted
            equal?  -> untouched
            else    -> decrypt -> encrypt for declared -> git add + commit
        [git push]                  if auto_push, result only logged

Everything runs blocking and strictly in sequence: one entry is fully
decrypted, re-encrypted and committed before the next is inspected.
A single undecryptable entry is skipped; a missing declaration stops
the whole walk.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .errors import AccessControlMissing
from .gpg import decrypt_args, encrypt_args
from .models import CIPHERTEXT_SUFFIX, DECRYPT_FAILED, ReencryptReport, StoreConfig
from .vcs import edit_message, entry_name

logger = logging.getLogger("skpass.engine")


def discover_entries(root: Path) -> list[Path]:
    """List ciphertexts beneath ``root``, grouped by directory.

    Hidden files and directories (``.git``, ``.gpg-id``) are skipped.
    The result is sorted by (directory, name) so a directory's entries
    are always visited contiguously.
    """
    entries = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for fname in filenames:
            if fname.startswith(".") or not fname.endswith(CIPHERTEXT_SUFFIX):
                continue
            entries.append(Path(dirpath) / fname)
    return sorted(entries, key=lambda p: (str(p.parent), p.name))


class ReencryptionEngine:
    """Detects recipient drift and re-encrypts the entries that drifted.

    Args:
        config: Store configuration.
        runner: CommandRunner for the blocking gpg calls.
        resolver: AccessControlResolver for declared recipients.
        inspector: RecipientSource for actual recipients.
        vcs: VersionSync for pull, push, add and commit.
    """

    def __init__(self, config: StoreConfig, runner, resolver, inspector, vcs):
        self.config = config
        self.runner = runner
        self.resolver = resolver
        self.inspector = inspector
        self.vcs = vcs

    def reencrypt_path(self, directory: Optional[Path] = None) -> ReencryptReport:
        """Re-encrypt every drifted entry under ``directory``.

        Args:
            directory: Subtree to walk, absolute or store-relative.
                Defaults to the store root.

        Returns:
            ReencryptReport describing the walk.

        Raises:
            AccessControlMissing: If a drifted entry has no usable
                declaration. The report is attached as ``exc.report``.
        """
        root = Path(directory) if directory is not None else self.config.store_root
        if not root.is_absolute():
            root = self.config.store_root / root
        report = ReencryptReport(root=root)

        logger.info("Re-encrypting from folder %s", root)
        if self.config.auto_pull:
            logger.info("Updating password-store")
            self.vcs.pull_blocking()

        try:
            self._walk(root, report)
        except AccessControlMissing as exc:
            report.aborted = True
            exc.report = report
            raise

        if self.config.auto_push:
            logger.info("Updating password-store")
            self.vcs.push_blocking()

        logger.info(
            "Re-encryption done: %d scanned, %d re-encrypted, %d skipped",
            report.scanned,
            len(report.reencrypted),
            len(report.skipped),
        )
        return report

    def _walk(self, root: Path, report: ReencryptReport) -> None:
        current_dir: Optional[Path] = None
        declared: list[str] = []

        for entry in discover_entries(root):
            report.scanned += 1
            if entry.parent != current_dir:
                current_dir = entry.parent
                declared = sorted(self.resolver.recipients(entry))

            actual = self.inspector.actual_recipients(entry)
            if actual == declared:
                continue

            logger.info("reencrypt %s for %s", entry, declared)
            self._reencrypt_entry(entry, report)

    def _reencrypt_entry(self, entry: Path, report: ReencryptReport) -> None:
        name = entry_name(self.config.store_root, entry)

        plaintext = self.runner.run_blocking(
            self.config.gpg_executable, decrypt_args(entry)
        ).stdout
        if not plaintext or plaintext == DECRYPT_FAILED:
            logger.warning("Decrypt error on re-encrypt: %s", name)
            report.skipped.append(name)
            return
        if not plaintext.endswith("\n"):
            plaintext += "\n"

        recipients = sorted(self.resolver.recipients(entry))
        if not recipients:
            logger.error("No usable recipients for %s, aborting walk", name)
            raise AccessControlMissing(name)

        self.runner.run_blocking(
            self.config.gpg_executable,
            encrypt_args(entry, recipients, overwrite=True),
            input=plaintext,
        )
        report.reencrypted.append(name)

        if self.config.commits_enabled:
            self.vcs.add_blocking(entry)
            self.vcs.commit_blocking(entry, edit_message(name))
            report.commits += 1
