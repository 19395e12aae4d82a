"""
GPG argument vectors.

The store delegates its container format to gpg entirely; these are
the exact command shapes it relies on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


def decrypt_args(ciphertext: Path) -> list[str]:
    """Decrypt to stdout through the agent, never prompting."""
    return [
        "-d", "--quiet", "--yes", "--no-encrypt-to",
        "--batch", "--use-agent", str(ciphertext),
    ]


def encrypt_args(ciphertext: Path, recipients: list[str], overwrite: bool = False) -> list[str]:
    """Encrypt stdin to ``ciphertext`` for every recipient."""
    args = ["--batch", "-eq", "--output", str(ciphertext)]
    for recipient in recipients:
        args.extend(["-r", recipient])
    if overwrite:
        args.append("--yes")
    args.append("-")
    return args


def list_only_args(ciphertext: Path) -> list[str]:
    """Print the recipient key ids of ``ciphertext`` without decrypting."""
    return [
        "-v", "--no-secmem-warning", "--no-permission-warning",
        "--list-only", "--keyid-format=long", str(ciphertext),
    ]


def list_keys_args(pattern: Optional[str] = None, secret: bool = False) -> list[str]:
    """Machine-readable key listing."""
    args = [
        "--with-colons", "--fixed-list-mode",
        "--list-secret-keys" if secret else "--list-keys",
    ]
    if pattern:
        args.append(pattern)
    return args
