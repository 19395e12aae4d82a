"""
Key ring -- candidate recipients from the local GPG keyring.

Parses ``gpg --with-colons`` listings. A ``pub``/``sec`` record opens
a key (field 1 validity, field 4 long key id); the first ``uid``
record after it names the key (field 9).
"""

from __future__ import annotations

import logging
from typing import Optional

from .gpg import list_keys_args
from .models import UserInfo

logger = logging.getLogger("skpass.keyring")

KEY_RECORDS = ("pub", "sec")
MIN_KEY_ID_LENGTH = 8
HEX_DIGITS = set("0123456789ABCDEF")


def parse_colon_listing(text: str) -> list[UserInfo]:
    """Turn a colon-format key listing into UserInfo records."""
    keys: list[UserInfo] = []
    current: Optional[UserInfo] = None
    for line in text.splitlines():
        fields = line.split(":")
        record = fields[0]
        if record in KEY_RECORDS and len(fields) > 4:
            current = UserInfo(key_id=fields[4], validity=fields[1])
            keys.append(current)
        elif record == "uid" and current is not None and not current.name and len(fields) > 9:
            current.name = fields[9]
    return keys


def matches_request(key: UserInfo, wanted: str) -> bool:
    """Whether ``wanted`` names ``key``.

    A key id, fingerprint or short id (at least eight hex digits, optional
    0x prefix) matches by suffix. Anything else must equal the whole user
    id or its email address.
    """
    needle = wanted.upper().removeprefix("0X")
    if len(needle) >= MIN_KEY_ID_LENGTH and set(needle) <= HEX_DIGITS:
        return key.key_id.upper().endswith(needle[-16:])
    name = key.name.lower()
    wanted = wanted.lower().strip("<>")
    email = name[name.rfind("<") + 1:name.rfind(">")] if name.endswith(">") else ""
    return wanted in (name, email)


class KeyRing:
    """Lists keys known to gpg.

    Args:
        runner: CommandRunner used for the blocking gpg call.
        gpg_executable: gpg binary.
    """

    def __init__(self, runner, gpg_executable: str = "gpg"):
        self.runner = runner
        self.gpg_executable = gpg_executable

    def list_keys(self, pattern: Optional[str] = None, secret: bool = False) -> list[UserInfo]:
        result = self.runner.run_blocking(self.gpg_executable, list_keys_args(pattern, secret))
        if not result.ok:
            logger.warning("gpg key listing exited %d", result.exit_code)
        keys = parse_colon_listing(result.stdout)
        if secret:
            for key in keys:
                key.have_secret = True
        return keys

    def candidates(self, requested: list[str]) -> list[UserInfo]:
        """Build enabled recipients for store initialization.

        Each requested id is matched against the public keyring with
        ``matches_request``. Unknown ids are still enabled,
        without a secret key, so the declaration lists them verbatim.
        """
        public = self.list_keys()
        secret_ids = {k.key_id for k in self.list_keys(secret=True)}

        users: list[UserInfo] = []
        for wanted in requested:
            match = next((k for k in public if matches_request(k, wanted)), None)
            if match is None:
                logger.warning("Key %s not found in keyring", wanted)
                users.append(UserInfo(key_id=wanted, enabled=True))
                continue
            users.append(
                match.model_copy(
                    update={"enabled": True, "have_secret": match.key_id in secret_ids}
                )
            )
        return users
