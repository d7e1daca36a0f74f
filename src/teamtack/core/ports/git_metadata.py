"""
Git Metadata Port - Latest commit details for completion comments.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class CommitInfo:
    short_hash: str
    full_hash: str
    message: str
    diff_stat: str = ""
    commit_url: str | None = None


class GitMetadataPort(ABC):
    """Reads commit metadata from the working copy."""

    @abstractmethod
    def get_latest_commit(self) -> CommitInfo | None:
        """Details of HEAD, or None outside a repository."""
        ...
