"""
Attachment adapters - download tracker-hosted files next to the cache.
"""

from .downloader import (
    KNOWN_IMAGE_HOSTS,
    HttpAttachmentDownloader,
    extract_image_urls,
    file_extension,
    is_known_image_host,
)


__all__ = [
    "KNOWN_IMAGE_HOSTS",
    "HttpAttachmentDownloader",
    "extract_image_urls",
    "file_extension",
    "is_known_image_host",
]
