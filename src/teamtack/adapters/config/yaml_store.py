"""
YAML config store - Config and LocalConfig as YAML documents.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from teamtack.core.exceptions import ConfigurationError, ValidationError
from teamtack.core.ports.config_provider import Config, ConfigStorePort, LocalConfig

from .paths import StoragePaths


logger = logging.getLogger("YamlConfigStore")


def read_yaml(path: Path) -> dict[str, Any] | None:
    """Load a YAML mapping; None when the file does not exist."""
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", cause=e) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return data


def write_yaml(path: Path, data: dict[str, Any]) -> None:
    """Write a YAML mapping atomically (temp file in the same dir, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class YamlConfigStore(ConfigStorePort):
    """Reads and writes ``config.yaml`` and ``local.yaml`` in the base directory."""

    def __init__(self, paths: StoragePaths):
        self.paths = paths

    def exists(self) -> bool:
        return self.paths.config_file.exists()

    def load_config(self) -> Config:
        data = read_yaml(self.paths.config_file)
        if data is None:
            raise ConfigurationError(
                f"No config found at {self.paths.config_file}. Run 'ttt init' first."
            )
        try:
            return Config.from_dict(data)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid config at {self.paths.config_file}", cause=e
            ) from e

    def save_config(self, config: Config) -> None:
        write_yaml(self.paths.config_file, config.to_dict())
        logger.debug(f"Saved config to {self.paths.config_file}")

    def load_local(self, config: Config | None = None) -> LocalConfig:
        data = read_yaml(self.paths.local_file)
        if data is None:
            raise ConfigurationError(
                f"No local config found at {self.paths.local_file}. Run 'ttt init' first."
            )
        try:
            return LocalConfig.from_dict(data, config=config)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid local config at {self.paths.local_file}", cause=e
            ) from e

    def save_local(self, local: LocalConfig) -> None:
        write_yaml(self.paths.local_file, local.to_dict())
        logger.debug(f"Saved local config to {self.paths.local_file}")
