"""Core business logic for auto-changelog.

This module contains the fundamental building blocks:
- The release and commit data model
- Pull-request normalization into releases
- Release source selection (feed, input file, git history)
- Changelog rendering and publishing
"""

from __future__ import annotations

from auto_changelog.core.changelog import generate_changelog
from auto_changelog.core.models import Commit, Fix, Merge, Release
from auto_changelog.core.normalizer import classify_branch, parse_pull_requests
from auto_changelog.core.pipeline import ReleaseSource, load_release_list, select_source
from auto_changelog.core.publisher import (
    PREPEND_TOKEN,
    PublishMode,
    PublishResult,
    format_bytes,
    publish,
)
from auto_changelog.core.template import compile_template

__all__ = [
    # Publisher
    "PREPEND_TOKEN",
    # Models
    "Commit",
    "Fix",
    "Merge",
    "PublishMode",
    "PublishResult",
    "Release",
    # Pipeline
    "ReleaseSource",
    # Normalizer
    "classify_branch",
    # Rendering
    "compile_template",
    "format_bytes",
    "generate_changelog",
    "load_release_list",
    "parse_pull_requests",
    "publish",
    "select_source",
]
