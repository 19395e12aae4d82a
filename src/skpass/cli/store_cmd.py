"""Store commands: init, reencrypt, keys, configure."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from ._common import console, open_store, report_jobs, store_options
from ..errors import StoreError
from ..models import ReencryptReport
from ..store import load_config, save_config


def _print_report(report: ReencryptReport) -> None:
    border = "red" if report.aborted else "green"
    console.print(Panel(
        f"Root: [cyan]{report.root}[/]\n"
        f"Scanned: [bold]{report.scanned}[/]\n"
        f"Re-encrypted: [bold]{len(report.reencrypted)}[/]\n"
        f"Skipped (decrypt failed): [bold]{len(report.skipped)}[/]\n"
        f"Commits: {report.commits}",
        title="Re-encryption",
        border_style=border,
    ))
    for name in report.reencrypted:
        console.print(f"  [green]~[/] {name}")
    for name in report.skipped:
        console.print(f"  [yellow]![/] {name}")


def register_store_commands(main: click.Group) -> None:
    """Register init, reencrypt, keys and configure."""

    @main.command("init")
    @click.argument("keys", nargs=-1, required=True)
    @click.option("--path", "-p", "subdir", default=None, help="Subfolder to declare.")
    @store_options
    def init(keys: tuple[str, ...], subdir: Optional[str], store_path, config_path):
        """Declare KEYS as the recipients of the store (or --path).

        Writes .gpg-id, commits it, then re-encrypts every entry
        below so it matches the new recipients.

        Examples:

            skpass init 0123456789ABCDEF

            skpass init -p work alice@example.org bob@example.org
        """
        store = open_store(store_path, config_path)
        users = store.keyring.candidates(list(keys))
        root = store.root / subdir if subdir else store.root

        try:
            report = store.mutator.initialize_store(root, users)
        except StoreError as exc:
            console.print(f"[bold red]Check selected users![/] {exc}")
            sys.exit(1)
        finally:
            report_jobs(store.runner.join())

        _print_report(report)

    @main.command("reencrypt")
    @click.argument("path", required=False)
    @store_options
    def reencrypt(path: Optional[str], store_path, config_path):
        """Re-encrypt every entry whose recipients drifted from .gpg-id."""
        store = open_store(store_path, config_path)
        try:
            report = store.engine.reencrypt_path(Path(path) if path else None)
        except StoreError as exc:
            partial = getattr(exc, "report", None)
            if partial is not None:
                _print_report(partial)
            console.print(f"[bold red]Can not edit:[/] {exc}")
            sys.exit(1)
        _print_report(report)

    @main.command("keys")
    @click.option("--secret", is_flag=True, help="List secret keys only.")
    @click.argument("pattern", required=False)
    @store_options
    def keys(secret: bool, pattern: Optional[str], store_path, config_path):
        """List keys available as recipients."""
        store = open_store(store_path, config_path)
        found = store.keyring.list_keys(pattern, secret=secret)
        if not found:
            console.print("[yellow]No keys found.[/]")
            return

        table = Table(title="Secret keys" if secret else "Public keys")
        table.add_column("Key ID", style="cyan")
        table.add_column("Validity")
        table.add_column("User ID")
        for key in found:
            table.add_row(key.key_id, key.validity, key.name)
        console.print(table)

    @main.command("configure")
    @click.option("--config", "config_path", default=None, type=click.Path())
    @click.option("--store", "store_path", default=None, type=click.Path())
    @click.option("--git/--no-git", "use_git", default=None)
    @click.option("--auto-pull/--no-auto-pull", default=None)
    @click.option("--auto-push/--no-auto-push", default=None)
    @click.option("--gpg", "gpg_executable", default=None, help="gpg binary.")
    @click.option("--git-executable", default=None, help="git binary.")
    def configure(config_path, store_path, use_git, auto_pull, auto_push, gpg_executable, git_executable):
        """Write store settings to the config file."""
        path = Path(config_path) if config_path else None
        config = load_config(
            path,
            store_path=Path(store_path) if store_path else None,
            use_git=use_git,
            auto_pull=auto_pull,
            auto_push=auto_push,
            gpg_executable=gpg_executable,
            git_executable=git_executable,
        )
        written = save_config(config, path)
        console.print(f"[green]Config saved[/] {written}")
