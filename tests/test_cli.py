"""
Tests for the skpass CLI via Click's test runner. subprocess.run is
mocked wherever a command would reach gpg or git.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from skpass.cli import main

from conftest import KEY_A, write_gpg_id


@pytest.fixture
def config_file(tmp_path: Path, store_root: Path) -> Path:
    """Config for a store without git."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"store_path": str(store_root), "use_git": False}))
    return path


def _invoke(args, **kwargs):
    return CliRunner().invoke(main, args, catch_exceptions=False, **kwargs)


class TestHelp:
    def test_main_help(self):
        result = _invoke(["--help"])

        assert result.exit_code == 0
        for command in ("insert", "show", "rm", "init", "reencrypt", "keys", "git"):
            assert command in result.output

    def test_version(self):
        result = _invoke(["--version"])

        assert result.exit_code == 0
        assert "skpass" in result.output


class TestInsert:
    def test_without_declaration_fails_before_gpg(self, config_file, store_root):
        with patch("skpass.runner.subprocess.run") as mock_run:
            result = _invoke(
                ["insert", "x", "--config", str(config_file)], input="secret\n"
            )

        assert result.exit_code == 1
        assert ".gpg-id" in result.output
        mock_run.assert_not_called()

    def test_pipes_secret_to_gpg(self, config_file, store_root):
        write_gpg_id(store_root, KEY_A)
        with patch(
            "skpass.runner.subprocess.run",
            return_value=subprocess.CompletedProcess([], 0, stdout="", stderr=""),
        ) as mock_run:
            result = _invoke(
                ["insert", "mail", "--config", str(config_file)], input="hunter2\n"
            )

        assert result.exit_code == 0
        cmd = mock_run.call_args.args[0]
        assert cmd[:5] == ["gpg", "--batch", "-eq", "--output", str(store_root / "mail.gpg")]
        assert mock_run.call_args.kwargs["input"] == "hunter2\n"


class TestShow:
    def test_prints_plaintext(self, config_file):
        with patch(
            "skpass.runner.subprocess.run",
            return_value=subprocess.CompletedProcess([], 0, stdout="hunter2\n", stderr=""),
        ):
            result = _invoke(["show", "mail", "--config", str(config_file)])

        assert result.exit_code == 0
        assert result.output == "hunter2\n"

    def test_decrypt_failure_exits_nonzero(self, config_file):
        with patch(
            "skpass.runner.subprocess.run",
            return_value=subprocess.CompletedProcess(
                [], 2, stdout="", stderr="gpg: decryption failed: No secret key"
            ),
        ):
            result = _invoke(["show", "mail", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Could not decrypt" in result.output

    def test_binary_secret_is_written_unchanged(self, config_file):
        with patch(
            "skpass.runner.subprocess.run",
            return_value=subprocess.CompletedProcess(
                [], 0, stdout="\udcff\udcfekey", stderr=""
            ),
        ):
            result = _invoke(["show", "keyfile", "--config", str(config_file)])

        assert result.exit_code == 0
        assert result.stdout_bytes == b"\xff\xfekey"


class TestRemove:
    def test_removes_directory_without_git(self, config_file, store_root):
        notes = store_root / "notes"
        notes.mkdir()
        (notes / "a.gpg").write_text("x")

        result = _invoke(["rm", "-r", "notes", "--config", str(config_file)])

        assert result.exit_code == 0
        assert not notes.exists()


class TestReencrypt:
    def test_converged_store(self, config_file, store_root):
        write_gpg_id(store_root, KEY_A)
        (store_root / "mail.gpg").write_text("x")
        listing = subprocess.CompletedProcess(
            [], 0, stdout="", stderr=f"gpg: public key is {KEY_A}\n"
        )
        with patch("skpass.runner.subprocess.run", return_value=listing) as mock_run:
            result = _invoke(["reencrypt", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Re-encryption" in result.output
        assert mock_run.call_count == 1

    def test_missing_declaration_exits_nonzero(self, config_file, store_root):
        (store_root / "mail.gpg").write_text("x")
        answer = subprocess.CompletedProcess(
            [], 0, stdout="pw\n", stderr=f"gpg: public key is {KEY_A}\n"
        )
        with patch("skpass.runner.subprocess.run", return_value=answer):
            result = _invoke(["reencrypt", "--config", str(config_file)])

        assert result.exit_code == 1
        assert ".gpg-id" in result.output


class TestInit:
    def test_no_secret_key(self, config_file, store_root):
        listing = subprocess.CompletedProcess([], 0, stdout="", stderr="")
        with patch("skpass.runner.subprocess.run", return_value=listing):
            result = _invoke(["init", KEY_A, "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Check selected users" in result.output
        assert (store_root / ".gpg-id").read_text() == f"{KEY_A}\n"


class TestKeys:
    def test_lists_keys(self, config_file):
        listing = subprocess.CompletedProcess(
            [], 0,
            stdout=(
                f"pub:u:4096:1:{KEY_A}:1600000000:::u:::scESC::::::23::0:\n"
                "uid:u::::1600000000::H::Alice <alice@example.org>::::::::::0:\n"
            ),
            stderr="",
        )
        with patch("skpass.runner.subprocess.run", return_value=listing):
            result = _invoke(["keys", "--config", str(config_file)])

        assert result.exit_code == 0
        assert KEY_A in result.output

    def test_no_keys(self, config_file):
        empty = subprocess.CompletedProcess([], 0, stdout="", stderr="")
        with patch("skpass.runner.subprocess.run", return_value=empty):
            result = _invoke(["keys", "--config", str(config_file)])

        assert "No keys found" in result.output


class TestConfigure:
    def test_writes_config(self, tmp_path: Path):
        config_path = tmp_path / "cfg" / "config.yaml"

        result = _invoke([
            "configure", "--config", str(config_path),
            "--store", str(tmp_path / "pw"), "--no-git", "--auto-pull",
        ])

        assert result.exit_code == 0
        data = yaml.safe_load(config_path.read_text())
        assert data["store_path"] == str(tmp_path / "pw")
        assert data["use_git"] is False
        assert data["auto_pull"] is True
