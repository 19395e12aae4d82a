"""
Recipient inspection -- who an entry was actually encrypted for.

gpg has no structured answer to this without decrypting, so we ask it
to list the packets verbosely and pick key ids out of the diagnostics:

    gpg: public key is 0123456789ABCDEF
                       ^ field 4, 16 characters

Any line whose fifth whitespace-separated field is exactly 16
characters long counts. Everything else is ignored, so a change in
gpg's wording degrades to "no recipients found" instead of an error.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .gpg import list_only_args

logger = logging.getLogger("skpass.inspector")

KEY_ID_LENGTH = 16
KEY_ID_FIELD = 4


def parse_recipient_listing(text: str) -> list[str]:
    """Extract long key ids from ``gpg --list-only`` output, sorted."""
    keys = []
    for line in text.splitlines():
        fields = line.split()
        if len(fields) > KEY_ID_FIELD and len(fields[KEY_ID_FIELD]) == KEY_ID_LENGTH:
            keys.append(fields[KEY_ID_FIELD])
    return sorted(keys)


class RecipientSource(ABC):
    """Reports the recipients a ciphertext is encrypted for."""

    @abstractmethod
    def actual_recipients(self, ciphertext: Path) -> list[str]:
        """Return the sorted recipient key ids of ``ciphertext``."""


class RecipientInspector(RecipientSource):
    """RecipientSource backed by gpg's verbose list-only diagnostics.

    Args:
        runner: CommandRunner used for the blocking gpg call.
        gpg_executable: gpg binary.
    """

    def __init__(self, runner, gpg_executable: str = "gpg"):
        self.runner = runner
        self.gpg_executable = gpg_executable

    def actual_recipients(self, ciphertext: Path) -> list[str]:
        result = self.runner.run_blocking(self.gpg_executable, list_only_args(ciphertext))
        keys = parse_recipient_listing(result.stdout + "\n" + result.stderr)
        logger.debug("%s is encrypted for %s", ciphertext, keys)
        return keys
