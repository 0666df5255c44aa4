"""Normalize Azure DevOps pull requests into releases.

Each completed pull request becomes one :class:`Commit`. The branch
naming convention ``<type>/<WORKITEM>-<slug>`` carries the
classification: ``refs/heads/bug/JIRA-42-crash`` is a ``bug`` for work
item ``JIRA``. The whole batch becomes a single :class:`Release` named
after the target branch of the first pull request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from auto_changelog.core.dates import nice_date
from auto_changelog.core.models import Commit, Release
from auto_changelog.exceptions import EmptyFeedError, MalformedRecordError

HEADS_PREFIX = "refs/heads/"
RELEASE_PREFIX = "refs/heads/release/"
BRANCH_SEPARATOR = "/"
WORK_ITEM_SEPARATOR = "-"

DEFAULT_FIX_TYPES = ("bug",)
DEFAULT_FEATURE_TYPES = ("feature",)


def strip_ref(ref: str, prefix: str = HEADS_PREFIX) -> str:
    """Remove a reference namespace prefix if present."""
    return ref.removeprefix(prefix)


def classify_branch(source_ref: str) -> tuple[str, str, str | None]:
    """Split a source ref into ``(branch, type, work_item_id)``.

    >>> classify_branch("refs/heads/bug/JIRA-42")
    ('bug/JIRA-42', 'bug', 'JIRA')

    A branch without a second segment has no work item.
    """
    branch = strip_ref(source_ref)
    segments = branch.split(BRANCH_SEPARATOR)
    work_item_id = None
    if len(segments) > 1:
        work_item_id = segments[1].split(WORK_ITEM_SEPARATOR)[0]
    return branch, segments[0], work_item_id


def web_url_from_api(api_url: str) -> str:
    """Derive the project web root from a REST endpoint.

    ``https://dev.azure.com/org/project/_apis/git/...`` becomes
    ``https://dev.azure.com/org/project``.
    """
    root, _, _ = api_url.partition("/_apis/")
    return root.rstrip("/")


def _field(
    record: Mapping[str, Any],
    path: str,
    index: int,
    expected: type | tuple[type, ...] = str,
) -> Any:
    """Look up a dotted path, raising MalformedRecordError when absent or mistyped."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value or value[part] is None:
            raise MalformedRecordError(
                f"Pull request #{index} is missing field '{path}'", index=index
            )
        value = value[part]
    if not isinstance(value, expected):
        raise MalformedRecordError(
            f"Pull request #{index} has an invalid field '{path}': {value!r}", index=index
        )
    return value


def normalize_pull_request(record: Mapping[str, Any], web_url: str, index: int = 0) -> Commit:
    """Convert one raw pull request into a :class:`Commit`.

    Raises:
        MalformedRecordError: If a field is missing or of the wrong type
    """
    source_ref = _field(record, "sourceRefName", index)
    closed = _field(record, "closedDate", index)
    commit_id = _field(record, "lastMergeSourceCommit.commitId", index)
    repository = _field(record, "repository.name", index)
    pull_request_id = _field(record, "pullRequestId", index, (int, str))
    branch, kind, work_item_id = classify_branch(source_ref)

    try:
        closed_nice = nice_date(closed)
    except ValueError as e:
        raise MalformedRecordError(
            f"Pull request #{index} has an invalid closedDate {closed!r}", index=index
        ) from e

    try:
        return Commit(
            hash=commit_id,
            short_hash=commit_id,
            author=_field(record, "createdBy.displayName", index),
            email=_field(record, "createdBy.uniqueName", index),
            subject=_field(record, "title", index),
            message=record.get("description") or "",
            date=closed,
            nice_date=closed_nice,
            tag=source_ref,
            branch=branch,
            type=kind,
            work_item_id=work_item_id,
            fixes=None,
            href=f"{web_url}/_git/{repository}/pullrequest/{pull_request_id}",
            merge=None,
        )
    except ValidationError as e:
        raise MalformedRecordError(
            f"Pull request #{index} is not a valid commit: {e}", index=index
        ) from e


def _with_type(commits: Iterable[Commit], types: Sequence[str]) -> tuple[Commit, ...]:
    return tuple(commit for commit in commits if commit.type in types)


def parse_pull_requests(
    records: Sequence[Mapping[str, Any]],
    *,
    web_url: str,
    fix_types: Sequence[str] = DEFAULT_FIX_TYPES,
    feature_types: Sequence[str] = DEFAULT_FEATURE_TYPES,
) -> list[Release]:
    """Build the release list for a batch of completed pull requests.

    Args:
        records: Raw pull requests as returned by the Azure DevOps API
        web_url: Project web root used to build links
        fix_types: Branch types listed under ``fixes``
        feature_types: Branch types listed under ``commits``

    Returns:
        A list holding exactly one release. Its identity comes from the
        first record; pull requests of other types are left out.

    Raises:
        EmptyFeedError: If ``records`` is empty
        MalformedRecordError: If any record lacks an expected field
    """
    if not records:
        raise EmptyFeedError("The pull request feed returned no records")

    commits = [
        normalize_pull_request(record, web_url, index) for index, record in enumerate(records)
    ]

    main = records[0]
    target = _field(main, "targetRefName", 0)
    repository = _field(main, "repository.name", 0)
    closed = commits[0].date

    release = Release(
        tag=target,
        title=strip_ref(target),
        version=strip_ref(target, RELEASE_PREFIX),
        date=closed,
        iso_date=closed,
        nice_date=commits[0].nice_date,
        summary=None,
        major=True,
        href=f"{web_url}/_git/{repository}/pullrequests?_a=completed&targetRefName={target}",
        fixes=_with_type(commits, fix_types),
        merges=(),
        commits=_with_type(commits, feature_types),
    )
    return [release]
