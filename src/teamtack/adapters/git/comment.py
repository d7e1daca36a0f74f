"""
Completion comment body posted to the tracker when a task is finished.
"""

from teamtack.core.ports.git_metadata import CommitInfo


def format_commit_link(commit: CommitInfo) -> str:
    if commit.commit_url:
        return f"[{commit.short_hash}]({commit.commit_url})"
    return f"`{commit.short_hash}`"


def build_completion_comment(message: str | None, commit: CommitInfo | None = None) -> str:
    """Markdown comment: summary, then commit details and diff stat when known."""
    parts = [
        "## ✅ Development complete",
        "",
        "### Summary",
        message or "_No description provided_",
    ]
    if commit is not None:
        parts += [
            "",
            "### 📝 Commit Info",
            f"**Commit:** {format_commit_link(commit)}",
            f"**Message:** {commit.message}",
        ]
        if commit.diff_stat:
            parts += ["", "### 📊 Changes", "```", commit.diff_stat, "```"]
    return "\n".join(parts)
