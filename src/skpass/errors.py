"""
Store errors -- the failures that stop a write.

Per-entry decryption failures during a re-encryption walk are not
here on purpose: the walk logs them and keeps going.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for password store failures surfaced to the user."""


class AccessControlMissing(StoreError):
    """Raised when no usable .gpg-id declaration covers a path."""

    def __init__(self, path: str = ""):
        self.path = path
        detail = "Could not read encryption key to use, .gpg-id file missing or invalid."
        super().__init__(f"{detail} ({path})" if path else detail)


class NoSecretKeyAvailable(StoreError):
    """Raised when none of the selected recipients has a secret key."""

    def __init__(self, gpg_id_path: str = ""):
        self.gpg_id_path = gpg_id_path
        super().__init__(
            "None of the selected keys have a secret key available. "
            "You will not be able to decrypt any newly added passwords!"
        )
