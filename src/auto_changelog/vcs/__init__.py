"""Version control access."""

from __future__ import annotations

from auto_changelog.vcs.git import GitRepository, RawCommit, Remote, Tag

__all__ = ["GitRepository", "RawCommit", "Remote", "Tag"]
