"""
HTTP attachment downloader.

Files are written as ``<taskId>_<attachmentId>.<ext>`` in the output
directory. Only hosts in KNOWN_IMAGE_HOSTS are fetched, since they are the
ones that need the tracker's credentials and expire otherwise.
"""

import logging
import re
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import requests

from teamtack.core.ports.attachments import AttachmentDownloaderPort


logger = logging.getLogger("HttpAttachmentDownloader")

KNOWN_IMAGE_HOSTS = (
    "uploads.linear.app",
    "linear-uploads.s3.us-west-2.amazonaws.com",
)

IMAGE_URL_PATTERNS = (
    re.compile(r"!\[[^\]]*\]\((https?://[^)]+)\)"),
    re.compile(r"(https?://uploads\.linear\.app/[^\s)>\]]+)"),
)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "svg"}
VIDEO_EXTENSIONS = {"mov", "mp4", "webm", "avi"}


def is_known_image_host(url: str) -> bool:
    try:
        host = urlparse(url).netloc
    except ValueError:
        return False
    return bool(host) and any(domain in host for domain in KNOWN_IMAGE_HOSTS)


def extract_image_urls(markdown: str) -> list[str]:
    """Known-host image URLs in markdown, in order of appearance, unique."""
    urls: list[str] = []
    for pattern in IMAGE_URL_PATTERNS:
        for match in pattern.finditer(markdown or ""):
            url = match.group(1)
            if is_known_image_host(url) and url not in urls:
                urls.append(url)
    return urls


def file_extension(url: str, content_type: str | None = None) -> str:
    """
    Extension for a downloaded file.

    Content-Type wins; then the URL path; ``png`` when neither helps.
    """
    if content_type:
        match = re.search(r"image/(\w+)", content_type)
        if match:
            return "jpg" if match.group(1) == "jpeg" else match.group(1)
        match = re.search(r"video/(\w+)", content_type)
        if match:
            return "mov" if match.group(1) == "quicktime" else match.group(1)

    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
    if suffix in IMAGE_EXTENSIONS:
        return "jpg" if suffix == "jpeg" else suffix
    if suffix in VIDEO_EXTENSIONS:
        return suffix
    return "png"


class HttpAttachmentDownloader(AttachmentDownloaderPort):
    """Downloads attachments with requests, sending the tracker's auth headers."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.timeout = timeout
        self._session = requests.Session()
        if headers:
            self._session.headers.update(headers)

    def is_known_image_host(self, url: str) -> bool:
        return is_known_image_host(url)

    def extract_image_urls(self, markdown: str) -> list[str]:
        return extract_image_urls(markdown)

    def download(self, url: str, task_id: str, attachment_id: str, output_dir: Path) -> str | None:
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error downloading {url}: {e}")
            return None

        if not response.ok:
            logger.warning(f"Failed to download {url}: HTTP {response.status_code}")
            return None

        ext = file_extension(url, response.headers.get("content-type"))
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / f"{task_id}_{attachment_id}.{ext}"
        try:
            target.write_bytes(response.content)
        except OSError as e:
            logger.warning(f"Could not write {target}: {e}")
            return None
        logger.debug(f"Downloaded {url} to {target}")
        return str(target)

    def clear_task_files(self, task_id: str, output_dir: Path) -> int:
        if not output_dir.is_dir():
            return 0
        removed = 0
        for path in output_dir.glob(f"{task_id}_*"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    def close(self) -> None:
        self._session.close()
