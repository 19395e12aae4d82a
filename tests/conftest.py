"""Shared test fixtures for skpass.

FakeRunner stands in for the CommandRunner: it records every command
and answers gpg calls from an in-memory table of ciphertexts, so no
real gpg or git process is ever spawned.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

from skpass.models import CommandResult, JobKind, JobResult, StoreConfig
from skpass.store import PassStore

KEY_A = "AAAAAAAAAAAAAAAA"
KEY_B = "BBBBBBBBBBBBBBBB"
KEY_C = "CCCCCCCCCCCCCCCC"


@dataclass
class Call:
    mode: str
    executable: str
    args: list[str]
    input: Optional[str] = None
    kind: Optional[JobKind] = None


class FakeRunner:
    """Recording CommandRunner with a simulated gpg."""

    def __init__(self):
        self.calls: list[Call] = []
        self.ciphertexts: dict[str, tuple[list[str], str]] = {}
        self.undecryptable: set[str] = set()
        self.exit_codes: dict[str, int] = {}
        self._ids = itertools.count(1)
        self._results: dict[int, JobResult] = {}

    def encrypt_file(self, path: Path, recipients: list[str], plaintext: str = "secret\n") -> Path:
        """Place a ciphertext on disk, encrypted for ``recipients``."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"-----BEGIN PGP MESSAGE-----")
        self.ciphertexts[str(path)] = (list(recipients), plaintext)
        return path

    def recipients_of(self, path: Path) -> list[str]:
        return self.ciphertexts[str(path)][0]

    def run_async(self, kind, executable, args, input=None, read_stdout=True, read_stderr=True):
        job_id = next(self._ids)
        self.calls.append(Call("async", executable, list(args), input, kind))
        result = self._answer(executable, list(args), input)
        self._results[job_id] = JobResult(
            job_id=job_id, kind=kind, exit_code=result.exit_code,
            stdout=result.stdout, stderr=result.stderr,
        )
        return job_id

    def run_blocking(self, executable, args, input=None):
        self.calls.append(Call("blocking", executable, list(args), input))
        return self._answer(executable, list(args), input)

    def wait(self, job_id, timeout=None):
        return self._results.pop(job_id)

    def join(self):
        results = [self._results[k] for k in sorted(self._results)]
        self._results.clear()
        return results

    # -- inspection helpers ------------------------------------------------

    def gpg_calls(self, flag: str) -> list[Call]:
        return [c for c in self.calls if c.executable == "gpg" and flag in c.args]

    def git_calls(self, subcommand: Optional[str] = None) -> list[Call]:
        return [
            c for c in self.calls
            if c.executable == "git" and (subcommand is None or c.args[0] == subcommand)
        ]

    def commit_messages(self) -> list[str]:
        return [c.args[c.args.index("-m") + 1] for c in self.git_calls("commit")]

    # -- simulation ---------------------------------------------------------

    def _answer(self, executable: str, args: list[str], input: Optional[str]) -> CommandResult:
        if executable != "gpg":
            return CommandResult(exit_code=self.exit_codes.get(args[0], 0))

        if "--list-only" in args:
            recipients, _ = self.ciphertexts.get(args[-1], ([], ""))
            lines = ["gpg: armor header: Version: GnuPG"]
            lines += [f"gpg: public key is {r}" for r in recipients]
            return CommandResult(exit_code=0, stderr="\n".join(lines) + "\n")

        if "-d" in args:
            path = args[-1]
            if path in self.undecryptable or path not in self.ciphertexts:
                return CommandResult(exit_code=2, stderr="gpg: decryption failed: No secret key")
            return CommandResult(exit_code=0, stdout=self.ciphertexts[path][1])

        if "-eq" in args:
            out = args[args.index("--output") + 1]
            recipients = [args[i + 1] for i, a in enumerate(args) if a == "-r"]
            Path(out).parent.mkdir(parents=True, exist_ok=True)
            Path(out).write_bytes(b"-----BEGIN PGP MESSAGE-----")
            self.ciphertexts[out] = (recipients, input or "")
            return CommandResult(exit_code=0)

        return CommandResult(exit_code=0)


def write_gpg_id(directory: Path, *keys: str) -> Path:
    """Write a .gpg-id declaring ``keys`` in ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    gpg_id = directory / ".gpg-id"
    gpg_id.write_text("".join(f"{k}\n" for k in keys), encoding="utf-8")
    return gpg_id


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Provide an empty password store directory."""
    root = tmp_path / "password-store"
    root.mkdir()
    return root


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def config(store_root: Path) -> StoreConfig:
    """Git-backed store config without auto pull/push."""
    return StoreConfig(store_path=store_root)


@pytest.fixture
def make_store(runner: FakeRunner, store_root: Path):
    """Build a PassStore on the fake runner with config overrides."""

    def _make(**overrides) -> PassStore:
        return PassStore(StoreConfig(store_path=store_root, **overrides), runner=runner)

    return _make


@pytest.fixture
def store(make_store) -> PassStore:
    return make_store()
