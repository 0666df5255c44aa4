"""Build releases from git tags and commits.

Every commit of a tag's range is classified once: merge commits of a
pull request go to ``merges``, commits closing an issue go to
``fixes`` and the remainder, after filtering, sorting and limiting, go
to ``commits``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from auto_changelog.core.dates import iso_date, nice_date, parse_date
from auto_changelog.core.models import Commit, Fix, Merge, Release
from auto_changelog.semver import is_valid_semver
from auto_changelog.vcs.git import Tag

if TYPE_CHECKING:
    from auto_changelog.config.models import ChangelogOptions
    from auto_changelog.vcs.git import GitRepository, RawCommit, Remote

logger = logging.getLogger(__name__)

DEFAULT_FIX_PATTERN = re.compile(
    r"(?:close[sd]?|fixe?[sd]?|resolve[sd]?)\s"
    r"(?:#(\d+)|(https?://.+?/(?:issues|pull|pull-requests|merge_requests)/(\d+)))",
    re.IGNORECASE,
)
DEFAULT_BREAKING_PATTERN = re.compile(r"BREAKING[ -]CHANGE:")


@dataclass(frozen=True)
class MergePattern:
    pattern: re.Pattern[str]
    id_group: int
    message_group: int


MERGE_PATTERNS = (
    # GitHub merge commit
    MergePattern(re.compile(r"^Merge pull request #(\d+) from .+\n\n(.+)"), 1, 2),
    # GitHub squash merge
    MergePattern(re.compile(r"^(.+) \(#(\d+)\)(?:$|\n\n)"), 2, 1),
    # Bitbucket
    MergePattern(re.compile(r"^Merged in .+ \(pull request #(\d+)\)\n\n(.+)"), 1, 2),
    # GitLab
    MergePattern(
        re.compile(r"^Merge branch .+ into .+\n\n(.+)[\S\s]+See merge request [^!]*!(\d+)"), 2, 1
    ),
    # Azure DevOps
    MergePattern(re.compile(r"^Merged PR (\d+): (.+)"), 1, 2),
)


def get_fixes(message: str, remote: Remote, options: ChangelogOptions) -> tuple[Fix, ...] | None:
    """Issues referenced by closing keywords in a commit message."""
    pattern = re.compile(options.issue_pattern) if options.issue_pattern else DEFAULT_FIX_PATTERN
    fixes = []
    for match in pattern.finditer(message):
        if options.issue_pattern:
            issue_id = (match.group(1) if pattern.groups else None) or match.group(0)
            href = remote.get_issue_link(issue_id)
        elif match.group(1):
            issue_id = match.group(1)
            href = remote.get_issue_link(issue_id)
        else:
            issue_id = match.group(3)
            href = match.group(2)
        fixes.append(Fix(id=issue_id, href=href or ""))
    return tuple(fixes) or None


def get_merge(raw: RawCommit, remote: Remote, options: ChangelogOptions) -> Merge | None:
    """Pull request a commit merged, if it is a merge commit."""
    patterns = list(MERGE_PATTERNS)
    if options.merge_pattern:
        patterns.insert(0, MergePattern(re.compile(options.merge_pattern), 1, 2))

    for merge in patterns:
        match = merge.pattern.search(raw.message)
        if match:
            merge_id = match.group(merge.id_group)
            return Merge(
                id=merge_id,
                message=match.group(merge.message_group).strip(),
                href=remote.get_merge_link(merge_id) or "",
                author=raw.author,
            )
    return None


def parse_commit(raw: RawCommit, remote: Remote, options: ChangelogOptions) -> Commit:
    """Classify one raw commit."""
    breaking = DEFAULT_BREAKING_PATTERN
    if options.breaking_pattern:
        breaking = re.compile(options.breaking_pattern)
    subject = raw.subject
    body = raw.message.partition("\n")[2].strip()
    merge = get_merge(raw, remote, options)
    commit = Commit(
        hash=raw.hash,
        short_hash=raw.hash[:7],
        author=raw.author,
        email=raw.email,
        subject=subject,
        message=body,
        date=raw.date,
        nice_date=nice_date(raw.date),
        fixes=get_fixes(raw.message, remote, options),
        href=remote.get_commit_link(raw.hash),
        breaking=bool(breaking.search(raw.message)),
        files=raw.files,
        insertions=raw.insertions,
        deletions=raw.deletions,
    )
    if merge is None:
        return commit
    return commit.model_copy(update={"merge": merge.model_copy(update={"commit": commit})})


def sort_key(options: ChangelogOptions) -> Callable[[Commit], tuple]:
    """Breaking commits first, then by the configured order."""

    def key(commit: Commit) -> tuple:
        if options.sort_commits == "date":
            order: float = _timestamp(commit.date)
        elif options.sort_commits == "date-desc":
            order = -_timestamp(commit.date)
        else:
            order = -(commit.insertions + commit.deletions)
        return (not commit.breaking, order)

    return key


def _timestamp(value: str) -> float:
    return parse_date(value).timestamp()


def _keep_commit(commit: Commit, merges: Iterable[Commit], options: ChangelogOptions) -> bool:
    if commit.fixes or commit.merge:
        return False
    if commit.breaking:
        return True
    if options.ignore_commit_pattern and re.search(options.ignore_commit_pattern, commit.subject):
        return False
    if is_valid_semver(commit.subject):
        return False
    return all(merge.merge.message != commit.subject for merge in merges if merge.merge)


def commit_limit(options: ChangelogOptions, empty_release: bool, breaking_count: int) -> int | None:
    """How many plain commits a release lists; ``None`` means all."""
    limit = options.backfill_limit if empty_release else options.commit_limit
    if limit is False:
        return None
    return max(limit, breaking_count)


def get_summary(message: str | None, options: ChangelogOptions) -> str | None:
    """Tag message body after the first line, when release summaries are on."""
    if not message or not options.release_summary:
        return None
    _, _, body = message.partition("\n")
    return body.strip() or None


def build_release(
    tag: Tag,
    commits: list[Commit],
    options: ChangelogOptions,
    summary: str | None = None,
) -> Release:
    merges = tuple(commit for commit in commits if commit.merge)
    fixes = tuple(commit for commit in commits if commit.fixes and not commit.merge)
    breaking_count = sum(1 for commit in commits if commit.breaking)
    limit = commit_limit(options, not merges and not fixes, breaking_count)

    kept = sorted(
        (commit for commit in commits if _keep_commit(commit, merges, options)),
        key=sort_key(options),
    )
    if limit is not None:
        kept = kept[:limit]

    return Release(
        tag=tag.tag,
        title=tag.title,
        version=tag.version,
        date=tag.date,
        iso_date=iso_date(tag.date),
        nice_date=nice_date(tag.date),
        summary=summary,
        major=tag.major,
        href=tag.href,
        fixes=fixes,
        merges=merges,
        commits=tuple(kept),
    )


def with_pending_tags(
    tags: list[Tag], remote: Remote, latest_version: str | None, options: ChangelogOptions
) -> list[Tag]:
    """Prepend pseudo tags for ``--latest-version`` and ``--unreleased``."""
    now = datetime.now(UTC).isoformat(timespec="seconds")
    previous = tags[0].tag if tags else None
    pending = []

    if latest_version:
        pending.append(
            Tag(
                tag=latest_version,
                title=latest_version,
                date=now,
                diff=f"{previous}.." if previous else "HEAD",
                version=latest_version.removeprefix(options.tag_prefix),
                major=True,
                href=remote.get_compare_link(previous, latest_version) if previous else None,
            )
        )
    elif options.unreleased or options.unreleased_only:
        pending.append(
            Tag(
                tag=None,
                title="Unreleased",
                date=now,
                diff=f"{previous}..HEAD" if previous else "HEAD",
                href=remote.get_compare_link(previous, "HEAD") if previous else None,
            )
        )

    linked = []
    for index, tag in enumerate(tags):
        older = tags[index + 1].tag if index + 1 < len(tags) else None
        href = remote.get_compare_link(older, tag.tag) if older and tag.tag else None
        linked.append(replace(tag, href=href))
    return pending + linked


def filter_releases(releases: list[Release], options: ChangelogOptions) -> list[Release]:
    if options.unreleased_only:
        return [release for release in releases if release.tag is None]
    if options.starting_version:
        for index, release in enumerate(releases):
            if release.tag == options.starting_version:
                return releases[: index + 1]
    return releases


def parse_releases(
    repo: GitRepository,
    tags: list[Tag],
    remote: Remote,
    latest_version: str | None,
    options: ChangelogOptions,
    on_parsed: Callable[[Release], None] | None = None,
) -> list[Release]:
    """Parse the commit history of every tag into releases, newest first."""
    real_tags = {tag.tag for tag in tags}
    releases = []
    for tag in with_pending_tags(tags, remote, latest_version, options):
        raw_commits = repo.get_commits(tag.diff or "HEAD", options.append_git_log)
        commits = [parse_commit(raw, remote, options) for raw in raw_commits]
        message = None
        if options.release_summary and tag.tag in real_tags:
            message = repo.get_tag_message(tag.tag)
        release = build_release(tag, commits, options, get_summary(message, options))
        logger.debug("%s: %d commits", release.title, len(commits))
        if on_parsed:
            on_parsed(release)
        releases.append(release)
    return filter_releases(releases, options)
