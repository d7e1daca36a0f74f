"""
Command context - paths, stores and adapters for one CLI invocation.
"""

import argparse
from pathlib import Path

from teamtack.adapters.attachments import HttpAttachmentDownloader
from teamtack.adapters.cache import CycleStore
from teamtack.adapters.config import (
    StoragePaths,
    YamlConfigStore,
    load_credentials,
    resolve_storage_paths,
)
from teamtack.application.sync import SyncOrchestrator
from teamtack.core.ports.config_provider import Config, LocalConfig
from teamtack.core.ports.task_source import TaskSourcePort
from teamtack.core.services import create_task_source


class CommandContext:
    """
    Lazily loads config and builds adapters for a command.

    Everything is derived from the resolved storage paths, so nothing
    depends on module-level state.
    """

    def __init__(self, paths: StoragePaths, dry_run: bool = False, env_file: Path | None = None):
        self.paths = paths
        self.dry_run = dry_run
        self.env_file = env_file
        self.store = YamlConfigStore(paths)
        self.cycle_store = CycleStore(paths.cycle_file)
        self._config: Config | None = None
        self._local: LocalConfig | None = None
        self._source: TaskSourcePort | None = None
        self._downloader: HttpAttachmentDownloader | None = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CommandContext":
        env_file = getattr(args, "env_file", None)
        return cls(
            resolve_storage_paths(getattr(args, "dir", None)),
            dry_run=getattr(args, "dry_run", False),
            env_file=Path(env_file) if env_file else None,
        )

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.store.load_config()
        return self._config

    @property
    def local(self) -> LocalConfig:
        if self._local is None:
            self._local = self.store.load_local(self.config)
        return self._local

    def source(self) -> TaskSourcePort:
        if self._source is None:
            credentials = load_credentials(self.env_file)
            self._source = create_task_source(self.config, credentials, dry_run=self.dry_run)
        return self._source

    def orchestrator(self) -> SyncOrchestrator:
        source = self.source()
        if self._downloader is None:
            self._downloader = HttpAttachmentDownloader(headers=source.download_headers())
        return SyncOrchestrator(
            source,
            self.config,
            self.local,
            self.cycle_store,
            config_store=self.store,
            downloader=self._downloader,
            output_dir=self.paths.output_dir,
            dry_run=self.dry_run,
        )

    def close(self) -> None:
        if self._source is not None:
            self._source.close()
        if self._downloader is not None:
            self._downloader.close()
