"""
Attachment Port - Download remote files referenced by tasks.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class AttachmentDownloaderPort(ABC):
    """
    Fetches attachment files into the output directory.

    Failures never raise: ``download`` returns None and the attachment is
    kept without a local path.
    """

    @abstractmethod
    def download(self, url: str, task_id: str, attachment_id: str, output_dir: Path) -> str | None:
        ...

    @abstractmethod
    def is_known_image_host(self, url: str) -> bool:
        ...

    @abstractmethod
    def extract_image_urls(self, markdown: str) -> list[str]:
        ...

    @abstractmethod
    def clear_task_files(self, task_id: str, output_dir: Path) -> int:
        """Remove previously downloaded files for a task; returns the count."""
        ...
