"""
PassStore -- one configuration, every component wired to it.

    config.yaml -> StoreConfig -> CommandRunner
                                  -> AccessControlResolver
                                  -> RecipientInspector
                                  -> VersionSync
                                  -> ReencryptionEngine
                                  -> EntryMutator
                                  -> KeyRing
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from . import SKPASS_HOME
from .acl import AccessControlResolver
from .engine import ReencryptionEngine
from .inspector import RecipientInspector
from .keyring import KeyRing
from .models import StoreConfig
from .mutator import EntryMutator
from .runner import CommandRunner
from .vcs import VersionSync

logger = logging.getLogger("skpass.store")

CONFIG_FILE = "config.yaml"


def default_config_path() -> Path:
    return Path(SKPASS_HOME).expanduser() / CONFIG_FILE


def load_config(path: Optional[Path] = None, **overrides) -> StoreConfig:
    """Load store configuration from YAML.

    Args:
        path: Config file. Defaults to ``$SKPASS_HOME/config.yaml``.
        **overrides: Field values that win over the file.

    Returns:
        StoreConfig. Defaults are used when the file is missing or invalid.
    """
    config_file = Path(path).expanduser() if path else default_config_path()
    data: dict = {}
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load config %s: %s", config_file, exc)
            data = {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return StoreConfig(**data)
    except ValidationError as exc:
        logger.warning("Invalid config %s: %s", config_file, exc)
        return StoreConfig(**{k: v for k, v in overrides.items() if v is not None})


def save_config(config: StoreConfig, path: Optional[Path] = None) -> Path:
    """Persist store configuration as YAML."""
    config_file = Path(path).expanduser() if path else default_config_path()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        yaml.dump(config.model_dump(mode="json"), default_flow_style=False),
        encoding="utf-8",
    )
    return config_file


class PassStore:
    """A password store and the components that operate on it.

    Args:
        config: Store configuration.
        runner: CommandRunner to use. Defaults to one rooted at the store.
    """

    def __init__(self, config: StoreConfig, runner=None):
        self.config = config
        self.runner = runner or CommandRunner(workdir=config.store_root)
        self.resolver = AccessControlResolver(config.store_root)
        self.inspector = RecipientInspector(self.runner, config.gpg_executable)
        self.vcs = VersionSync(self.runner, config)
        self.engine = ReencryptionEngine(
            config, self.runner, self.resolver, self.inspector, self.vcs
        )
        self.mutator = EntryMutator(
            config, self.runner, self.resolver, self.vcs, self.engine
        )
        self.keyring = KeyRing(self.runner, config.gpg_executable)

    @classmethod
    def open(cls, config_path: Optional[Path] = None, **overrides) -> "PassStore":
        """Build a PassStore from the config file."""
        return cls(load_config(config_path, **overrides))

    @property
    def root(self) -> Path:
        return self.config.store_root
