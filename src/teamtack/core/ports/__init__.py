"""
Ports - abstract interfaces the application layer depends on.
"""

from .attachments import AttachmentDownloaderPort
from .config_provider import (
    Config,
    ConfigStorePort,
    Credentials,
    LocalConfig,
    QaPmTeamConfig,
    SourceConfig,
    StatusConfig,
    TeamConfig,
    UserConfig,
)
from .git_metadata import CommitInfo, GitMetadataPort
from .task_source import (
    GetIssuesOptions,
    InitData,
    SourceIssue,
    TaskSourcePort,
    WriteResult,
)


__all__ = [
    "AttachmentDownloaderPort",
    "CommitInfo",
    "Config",
    "ConfigStorePort",
    "Credentials",
    "GetIssuesOptions",
    "GitMetadataPort",
    "InitData",
    "LocalConfig",
    "QaPmTeamConfig",
    "SourceConfig",
    "SourceIssue",
    "StatusConfig",
    "TaskSourcePort",
    "TeamConfig",
    "UserConfig",
    "WriteResult",
]
