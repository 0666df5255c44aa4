"""Changelog generation.

Ties the three stages of a run together: load the release list from the
selected source, render it with the configured template and publish the
result. Each stage runs once; the first error aborts the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from auto_changelog.core.pipeline import CACHE_FILE, FeedFetcher, load_release_list
from auto_changelog.core.publisher import PublishResult, publish
from auto_changelog.core.template import compile_template
from auto_changelog.feeds.azure import fetch_pull_requests

if TYPE_CHECKING:
    from pathlib import Path

    from auto_changelog.config.models import ChangelogOptions
    from auto_changelog.progress import ProgressReporter
    from auto_changelog.vcs.git import GitRepository


def generate_changelog(
    options: ChangelogOptions,
    reporter: ProgressReporter,
    *,
    fetch_feed: FeedFetcher = fetch_pull_requests,
    repo: GitRepository | None = None,
    cache_file: Path = CACHE_FILE,
    stream: TextIO | None = None,
) -> PublishResult:
    """Generate and publish a changelog.

    Args:
        options: Resolved options
        reporter: Progress reporter for the pipeline and the publisher
        fetch_feed: Pull-request fetcher for the feed source
        repo: Git repository for the live-history source
        cache_file: Where the feed source caches normalized releases
        stream: Destination for stdout mode

    Returns:
        How the changelog was published

    Raises:
        AutoChangelogError: If loading or rendering releases fails
        OSError: If the changelog cannot be written
    """
    releases = load_release_list(
        options,
        reporter,
        fetch_feed=fetch_feed,
        repo=repo,
        cache_file=cache_file,
    )
    changelog = compile_template(options, releases)
    return publish(changelog, options.output, reporter, stdout=options.stdout, stream=stream)
