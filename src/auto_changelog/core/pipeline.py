"""Choose where the release list comes from.

Exactly one source runs per invocation, checked in this order:

1. the Azure DevOps pull-request feed, when both ``azure_api`` and
   ``azure_user`` are configured
2. a pre-processed release file given with ``input``
3. the live git history (default)

All three produce the same ``list[Release]``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from auto_changelog.config.loader import PACKAGE_FILE, PYPROJECT_FILE, load_json_file
from auto_changelog.core.history import parse_releases
from auto_changelog.core.models import Release, dump_releases, load_releases
from auto_changelog.core.normalizer import parse_pull_requests, web_url_from_api
from auto_changelog.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    ReleaseFileError,
)
from auto_changelog.feeds.azure import fetch_pull_requests
from auto_changelog.project.pyproject import get_pyproject_version
from auto_changelog.semver import require_semver
from auto_changelog.vcs.git import GitRepository

if TYPE_CHECKING:
    from auto_changelog.config.models import ChangelogOptions
    from auto_changelog.progress import ProgressReporter
    from auto_changelog.vcs.git import Tag

logger = logging.getLogger(__name__)

CACHE_FILE = Path("releases.json")

FeedFetcher = Callable[[str, str], list[dict[str, Any]]]


class ReleaseSource(str, Enum):
    EXTERNAL_FEED = "external-feed"
    INPUT_FILE = "input-file"
    LIVE_HISTORY = "live-history"


def select_source(options: ChangelogOptions) -> ReleaseSource:
    """Pick the release source by fixed priority."""
    if options.has_azure_feed:
        return ReleaseSource.EXTERNAL_FEED
    if options.input:
        return ReleaseSource.INPUT_FILE
    return ReleaseSource.LIVE_HISTORY


def read_releases(path: Path) -> list[Release]:
    """Read a JSON release list.

    Raises:
        ReleaseFileError: If the file is missing or not a valid release list
    """
    if not path.exists():
        raise ReleaseFileError(f"Release file {path} does not exist")
    if not path.is_file():
        raise ReleaseFileError(f"Release file {path} is not a file")
    try:
        return load_releases(path.read_bytes())
    except ValidationError as e:
        raise ReleaseFileError(f"{path} is not a valid release list: {e}") from e


def releases_from_input(options: ChangelogOptions) -> list[Release]:
    """Read the release file given with ``input``.

    Raises:
        ConfigError: If no release file is configured
        ReleaseFileError: If the file is missing or not a valid release list
    """
    if options.input is None:
        raise ConfigError("No release file configured")
    return read_releases(options.input)


def write_releases(path: Path, releases: list[Release]) -> None:
    path.write_text(dump_releases(releases), encoding="utf-8")


def releases_from_feed(
    options: ChangelogOptions,
    reporter: ProgressReporter,
    fetch_feed: FeedFetcher = fetch_pull_requests,
    cache_file: Path = CACHE_FILE,
) -> list[Release]:
    """Fetch, normalize and cache the pull-request feed.

    The normalized list is written to ``cache_file`` and read back, so
    the returned releases are exactly what the cache file holds.

    Raises:
        ConfigError: If the endpoint or the credential is not configured
    """
    api_url, credential = options.azure_api, options.azure_user
    if not api_url or not credential:
        raise ConfigError("The pull request feed needs both azure_api and azure_user")

    reporter.update("Fetching pull requests…")
    records = fetch_feed(api_url, credential)
    reporter.update(f"{len(records)} pull requests found…")

    releases = parse_pull_requests(
        records,
        web_url=options.azure_web_url or web_url_from_api(api_url),
        fix_types=options.fix_types,
        feature_types=options.feature_types,
    )
    write_releases(cache_file, releases)
    logger.debug("Cached %d releases in %s", len(releases), cache_file)
    return read_releases(cache_file)


def get_latest_version(options: ChangelogOptions, tags: list[Tag], cwd: Path) -> str | None:
    """Version to use for the newest, not yet tagged, release.

    Raises:
        InvalidVersionError: If ``latest_version`` is not semver
        ConfigNotFoundError: If the ``package`` manifest does not exist
    """
    if options.latest_version:
        return require_semver(options.latest_version)

    path = _manifest_path(options, cwd)
    if path is None:
        return None

    version = _manifest_version(path)
    prefix = "v" if any(tag.tag and tag.tag.startswith("v") for tag in tags) else ""
    return f"{prefix}{version}"


def _manifest_path(options: ChangelogOptions, cwd: Path) -> Path | None:
    if options.package is False:
        return None

    path = cwd / (PYPROJECT_FILE if options.package is True else options.package)
    if options.package is True and not path.is_file():
        path = cwd / PACKAGE_FILE
    if not path.is_file():
        raise ConfigNotFoundError(f"File {path} does not exist")
    return path


def _manifest_version(path: Path) -> str:
    if path.suffix == ".toml":
        return get_pyproject_version(path)

    data = load_json_file(path)
    if not isinstance(data, dict) or not isinstance(data.get("version"), str):
        raise ConfigValidationError(f"No version found in {path}")
    return data["version"]


def check_options(options: ChangelogOptions, cwd: Path) -> None:
    """Fail on invalid user input before any data is fetched.

    Raises:
        InvalidVersionError: If ``latest_version`` is not semver
        ConfigNotFoundError: If the ``package`` manifest does not exist
    """
    if options.latest_version:
        require_semver(options.latest_version)
    elif select_source(options) is ReleaseSource.LIVE_HISTORY:
        _manifest_path(options, cwd)


def releases_from_history(
    options: ChangelogOptions,
    reporter: ProgressReporter,
    repo: GitRepository | None = None,
) -> list[Release]:
    """Parse releases from the local git history."""
    repo = repo or GitRepository()
    reporter.update("Fetching remote…")
    remote = repo.fetch_remote(options)
    reporter.update("Fetching tags…")
    tags = repo.fetch_tags(options)
    reporter.update(f"{len(tags)} version tags found…")
    latest_version = get_latest_version(options, tags, repo.path)
    return parse_releases(
        repo,
        tags,
        remote,
        latest_version,
        options,
        on_parsed=lambda release: reporter.update(f"Fetched {release.title}…"),
    )


def load_release_list(
    options: ChangelogOptions,
    reporter: ProgressReporter,
    *,
    fetch_feed: FeedFetcher = fetch_pull_requests,
    repo: GitRepository | None = None,
    cache_file: Path = CACHE_FILE,
) -> list[Release]:
    """Produce the release list from the selected source.

    Raises:
        AutoChangelogError: Any failure of the selected source; nothing is
            retried and no other source is tried
    """
    check_options(options, repo.path if repo else Path.cwd())
    source = select_source(options)
    logger.debug("Release source: %s", source.value)

    if source is ReleaseSource.EXTERNAL_FEED:
        return releases_from_feed(options, reporter, fetch_feed, cache_file)
    if source is ReleaseSource.INPUT_FILE:
        return releases_from_input(options)
    return releases_from_history(options, reporter, repo)
