"""Shared utilities for all CLI command modules.

Provides the Rich console, logging setup, store construction, and
reporting of asynchronous job completions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ..models import JobResult
from ..store import PassStore, load_config

console = Console()
logger = logging.getLogger("skpass.cli")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    """Configure root logging for a CLI invocation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def store_options(func):
    """Attach the --store and --config options shared by every command."""
    func = click.option(
        "--config", "config_path", default=None, type=click.Path(),
        help="Config file (default: $SKPASS_HOME/config.yaml).",
    )(func)
    func = click.option(
        "--store", "store_path", default=None, type=click.Path(),
        help="Password store root (overrides config).",
    )(func)
    return func


def open_store(store_path: Optional[str], config_path: Optional[str]) -> PassStore:
    """Build a PassStore from CLI options."""
    config = load_config(
        Path(config_path) if config_path else None,
        store_path=Path(store_path) if store_path else None,
    )
    return PassStore(config)


def report_jobs(results: list[JobResult]) -> bool:
    """Print failed jobs. Returns True when every job exited cleanly."""
    clean = True
    for result in results:
        if result.ok:
            continue
        clean = False
        detail = result.stderr.strip() or f"exit {result.exit_code}"
        console.print(f"  [yellow]{result.kind.value}[/] [dim]#{result.job_id}[/] {detail}")
    return clean
