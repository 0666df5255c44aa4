"""Shared fixtures for auto-changelog tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from auto_changelog.core.models import Commit, Release
from auto_changelog.progress import RecordingReporter
from auto_changelog.vcs.git import RawCommit

PullRequestFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def make_pull_request() -> PullRequestFactory:
    """Build raw Azure DevOps pull-request records."""

    def factory(
        pull_request_id: int = 1,
        source: str = "refs/heads/feature/JIRA-1-login",
        target: str = "refs/heads/release/1.2.0",
        closed: str = "2021-03-04T12:34:56.789Z",
        title: str = "Add login page",
        description: str | None = "Adds a login page",
        repository: str = "webapp",
    ) -> dict[str, Any]:
        return {
            "pullRequestId": pull_request_id,
            "sourceRefName": source,
            "targetRefName": target,
            "closedDate": closed,
            "title": title,
            "description": description,
            "lastMergeSourceCommit": {"commitId": f"c0ffee{pull_request_id:04d}"},
            "createdBy": {"displayName": "Ada Lovelace", "uniqueName": "ada@example.com"},
            "repository": {"name": repository},
        }

    return factory


@pytest.fixture
def pull_requests(make_pull_request: PullRequestFactory) -> list[dict[str, Any]]:
    """A feature, a bug and a chore pull request into release/1.2.0."""
    return [
        make_pull_request(1, "refs/heads/feature/JIRA-1-login", title="Add login page"),
        make_pull_request(2, "refs/heads/bug/JIRA-42-crash", title="Fix crash on save"),
        make_pull_request(3, "refs/heads/chore/JIRA-7-deps", title="Bump dependencies"),
    ]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def sample_release() -> Release:
    commit = Commit(
        hash="abc1234def",
        short_hash="abc1234",
        author="Ada Lovelace",
        email="ada@example.com",
        subject="Add login page",
        message="",
        date="2021-03-04T12:34:56+00:00",
        nice_date="4 March 2021",
        type="feature",
        href="https://example.com/commit/abc1234def",
    )
    fix = commit.model_copy(
        update={"hash": "fff0000aaa", "short_hash": "fff0000", "subject": "Fix crash on save"}
    )
    return Release(
        tag="v1.2.0",
        title="v1.2.0",
        version="1.2.0",
        date="2021-03-04T12:34:56+00:00",
        iso_date="2021-03-04",
        nice_date="4 March 2021",
        major=True,
        href="https://example.com/compare/v1.1.0...v1.2.0",
        fixes=(fix,),
        commits=(commit,),
    )


@pytest.fixture
def make_raw_commit() -> Callable[..., RawCommit]:
    def factory(
        hash: str = "a" * 40,
        message: str = "Add feature",
        date: str = "2021-03-04T12:00:00+00:00",
        insertions: int = 1,
        deletions: int = 0,
    ) -> RawCommit:
        return RawCommit(
            hash=hash,
            date=date,
            author="Ada Lovelace",
            email="ada@example.com",
            message=message,
            files=1,
            insertions=insertions,
            deletions=deletions,
        )

    return factory
