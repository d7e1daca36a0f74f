"""
Git adapter - commit metadata for completion comments.
"""

from .comment import build_completion_comment, format_commit_link
from .provider import GitCliMetadataProvider, build_commit_url


__all__ = [
    "GitCliMetadataProvider",
    "build_commit_url",
    "build_completion_comment",
    "format_commit_link",
]
