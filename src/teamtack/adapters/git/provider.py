"""
Git CLI metadata provider.

Shells out to ``git`` in the working directory. Any failure (not a
repository, no git binary, a root commit without HEAD~1) yields None.
"""

import logging
import re
import subprocess
from pathlib import Path

from teamtack.core.ports.git_metadata import CommitInfo, GitMetadataPort


logger = logging.getLogger("GitCliMetadataProvider")

REMOTE_PATTERN = re.compile(r"(?:git@|https://)([^:/]+)[:/](.+?)(?:\.git)?$")


def build_commit_url(remote_url: str, full_hash: str) -> str | None:
    """
    Web URL of a commit for GitHub and GitLab remotes, SSH or HTTPS.

    Other hosts return None.
    """
    match = REMOTE_PATTERN.search(remote_url.strip())
    if not match:
        return None
    host, repo_path = match.group(1), match.group(2)
    if "gitlab" in remote_url:
        return f"https://{host}/{repo_path}/-/commit/{full_hash}"
    if "github" in remote_url:
        return f"https://{host}/{repo_path}/commit/{full_hash}"
    return None


class GitCliMetadataProvider(GitMetadataPort):
    """Reads HEAD details via the git command line."""

    TIMEOUT = 10

    def __init__(self, cwd: Path | None = None):
        self.cwd = cwd

    def _git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=self.TIMEOUT,
            cwd=self.cwd,
            check=True,
        )
        return result.stdout.strip()

    def _remote_url(self) -> str | None:
        try:
            return self._git("remote", "get-url", "origin") or None
        except (OSError, subprocess.SubprocessError):
            return None

    def get_latest_commit(self) -> CommitInfo | None:
        try:
            short_hash = self._git("rev-parse", "--short", "HEAD")
            full_hash = self._git("rev-parse", "HEAD")
            message = self._git("log", "-1", "--format=%s")
            diff_stat = self._git("diff", "HEAD~1", "--stat", "--stat-width=60")
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"No commit metadata available: {e}")
            return None

        remote = self._remote_url()
        return CommitInfo(
            short_hash=short_hash,
            full_hash=full_hash,
            message=message,
            diff_stat=diff_stat,
            commit_url=build_commit_url(remote, full_hash) if remote else None,
        )
