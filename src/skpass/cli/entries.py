"""Entry commands: insert, show, rm."""

from __future__ import annotations

import sys

import click

from ._common import console, open_store, report_jobs, store_options
from ..errors import StoreError


def register_entry_commands(main: click.Group) -> None:
    """Register insert, show and rm."""

    @main.command("insert")
    @click.argument("path")
    @click.option("--overwrite", "-f", is_flag=True, help="Replace an existing entry.")
    @store_options
    def insert(path: str, overwrite: bool, store_path, config_path):
        """Encrypt a secret into PATH for the recipients of its directory.

        The secret is read from stdin when piped, otherwise prompted for.

        Examples:

            skpass insert email/work

            echo hunter2 | skpass insert -f email/work
        """
        store = open_store(store_path, config_path)

        if sys.stdin.isatty():
            secret = click.prompt(
                f"Secret for {path}", hide_input=True, confirmation_prompt=True
            ) + "\n"
        else:
            secret = sys.stdin.read()

        try:
            store.mutator.insert(path, secret, overwrite=overwrite)
        except StoreError as exc:
            console.print(f"[bold red]Can not edit:[/] {exc}")
            sys.exit(1)

        if not report_jobs(store.runner.join()):
            sys.exit(1)
        console.print(f"[green]Saved[/] {path}")

    @main.command("show")
    @click.argument("path")
    @store_options
    def show(path: str, store_path, config_path):
        """Decrypt PATH and print it."""
        store = open_store(store_path, config_path)
        result = store.mutator.show_blocking(path)
        if not result.ok or not result.stdout:
            console.print(f"[bold red]Could not decrypt[/] {path}")
            if result.stderr.strip():
                console.print(f"  [dim]{result.stderr.strip()}[/]")
            sys.exit(1)
        click.echo(result.stdout.encode("utf-8", "surrogateescape"), nl=False)

    @main.command("rm")
    @click.argument("path")
    @click.option("--recursive", "-r", is_flag=True, help="Remove a whole directory.")
    @store_options
    def rm(path: str, recursive: bool, store_path, config_path):
        """Remove the entry (or directory, with -r) at PATH."""
        store = open_store(store_path, config_path)
        store.mutator.remove(path, is_dir=recursive)
        if not report_jobs(store.runner.join()):
            sys.exit(1)
        console.print(f"[green]Removed[/] {path}")
