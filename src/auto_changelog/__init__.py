"""auto-changelog: changelogs from git history or pull-request feeds."""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]
