"""Git commands: init, pull, push."""

from __future__ import annotations

import sys

import click

from ._common import console, open_store, report_jobs, store_options


def register_git_commands(main: click.Group) -> None:
    """Register the git command group."""

    @main.group()
    def git():
        """Version history of the store.

        Every insert, edit and removal is one commit.
        """

    def _run(action: str, store_path, config_path) -> None:
        store = open_store(store_path, config_path)
        getattr(store.vcs, action)()
        if not report_jobs(store.runner.join()):
            sys.exit(1)
        console.print(f"[green]git {action}[/] done")

    @git.command("init")
    @store_options
    def git_init(store_path, config_path):
        """Create a git repository in the store root."""
        _run("init", store_path, config_path)

    @git.command("pull")
    @store_options
    def git_pull(store_path, config_path):
        """Pull the store from its remote."""
        _run("pull", store_path, config_path)

    @git.command("push")
    @store_options
    def git_push(store_path, config_path):
        """Push the store to its remote."""
        _run("push", store_path, config_path)
