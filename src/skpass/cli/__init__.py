"""
SKPass CLI -- the sovereign password store command line.

Commands are organised in modules; each one registers itself on
the main Click group.

Entry point: skpass.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="skpass")
@click.option("--verbose", "-v", is_flag=True, help="Log gpg and git activity.")
def main(verbose: bool):
    """SKPass: one secret per file, encrypted for exactly who may read it."""
    setup_logging(verbose)


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .entries import register_entry_commands
from .store_cmd import register_store_commands
from .git_cmd import register_git_commands

register_entry_commands(main)
register_store_commands(main)
register_git_commands(main)
