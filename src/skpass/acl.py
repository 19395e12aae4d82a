"""
Access control -- which keys a path must be encrypted for.

Each directory may carry a .gpg-id file listing recipient key ids,
one per line. Directories without one inherit the nearest ancestor's,
up to the store root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .models import GPG_ID_FILE

logger = logging.getLogger("skpass.acl")


def parse_gpg_id(text: str) -> list[str]:
    """Extract recipient ids from .gpg-id content, in file order.

    Blank lines and ``#`` comments are not recipients.
    """
    recipients = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            recipients.append(line)
    return recipients


class AccessControlResolver:
    """Resolves the declared recipients for paths inside a store.

    Args:
        store_root: Root directory of the password store.
    """

    def __init__(self, store_root: Path):
        self.store_root = store_root

    def _absolute(self, path: Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.store_root / path

    def _inside_store(self, path: Path) -> bool:
        return path == self.store_root or self.store_root in path.parents

    def gpg_id_path(self, path: Path) -> Optional[Path]:
        """Find the .gpg-id file governing ``path``.

        Args:
            path: An entry (file) or directory, absolute or store-relative.

        Returns:
            Path to the nearest .gpg-id, or None if the store has none.
        """
        path = self._absolute(path)
        current = path if path.is_dir() else path.parent

        while self._inside_store(current):
            candidate = current / GPG_ID_FILE
            if candidate.is_file():
                return candidate
            if current == self.store_root:
                break
            current = current.parent

        fallback = self.store_root / GPG_ID_FILE
        return fallback if fallback.is_file() else None

    def recipients(self, path: Path) -> list[str]:
        """Return the declared recipients for ``path`` in file order.

        An empty list means no usable declaration: callers must refuse
        to write rather than encrypt for nobody.
        """
        gpg_id = self.gpg_id_path(path)
        if gpg_id is None:
            logger.warning("No %s found for %s", GPG_ID_FILE, path)
            return []
        try:
            text = gpg_id.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read %s: %s", gpg_id, exc)
            return []
        return parse_gpg_id(text)
