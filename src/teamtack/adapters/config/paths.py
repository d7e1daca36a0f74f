"""
Storage paths - where config, local config, cache and downloads live.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


DEFAULT_DIR_NAME = ".ttt"
DIR_ENV_VARS = ("TEAMTACK_DIR", "TOON_DIR")


@dataclass(frozen=True)
class StoragePaths:
    """Resolved file locations for one base directory."""

    base_dir: Path

    @property
    def config_file(self) -> Path:
        return self.base_dir / "config.yaml"

    @property
    def local_file(self) -> Path:
        return self.base_dir / "local.yaml"

    @property
    def cycle_file(self) -> Path:
        return self.base_dir / "cycle.yaml"

    @property
    def output_dir(self) -> Path:
        return self.base_dir / "output"


def resolve_storage_paths(
    explicit_dir: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> StoragePaths:
    """
    Pick the base directory.

    Order: ``explicit_dir``, then TEAMTACK_DIR, then TOON_DIR, then
    ``./.ttt``. Relative paths are taken from ``cwd``.
    """
    env = os.environ if environ is None else environ
    root = cwd or Path.cwd()

    chosen: str | Path | None = explicit_dir
    if not chosen:
        for name in DIR_ENV_VARS:
            if env.get(name):
                chosen = env[name]
                break

    base = Path(chosen) if chosen else Path(DEFAULT_DIR_NAME)
    if not base.is_absolute():
        base = root / base
    return StoragePaths(base_dir=base)
