"""Tests for git access."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from auto_changelog.config.models import ChangelogOptions
from auto_changelog.exceptions import GitError
from auto_changelog.vcs.git import (
    COMMIT_SEPARATOR,
    MESSAGE_SEPARATOR,
    GitRepository,
    Remote,
    parse_log,
    remote_web_url,
)


def log_entry(hash: str, message: str, stats: str = "") -> str:
    return (
        f"{COMMIT_SEPARATOR}{hash}\n2021-03-04T12:00:00+01:00\nAda Lovelace\nada@example.com\n"
        f"{message}\n{MESSAGE_SEPARATOR}\n{stats}\n"
    )


def tag_lines(*entries: str) -> str:
    return "".join(f"{name}---2021-03-04T12:00:00+00:00\n" for name in entries)


class TestParseLog:
    """Tests for parse_log()."""

    def test_parses_commits(self):
        """Fields, message and diff stats are read for every commit."""
        output = log_entry(
            "a" * 40,
            "Add search\n\nWith filters",
            " 3 files changed, 10 insertions(+), 2 deletions(-)",
        ) + log_entry("b" * 40, "Fix typo", " 1 file changed, 1 insertion(+)")

        commits = parse_log(output)

        assert len(commits) == 2
        first, second = commits
        assert first.hash == "a" * 40
        assert first.date == "2021-03-04T12:00:00+01:00"
        assert first.author == "Ada Lovelace"
        assert first.email == "ada@example.com"
        assert first.message == "Add search\n\nWith filters"
        assert first.subject == "Add search"
        assert (first.files, first.insertions, first.deletions) == (3, 10, 2)
        assert (second.files, second.insertions, second.deletions) == (1, 1, 0)

    def test_commit_without_stats(self):
        """Empty commits have zero stats."""
        commits = parse_log(log_entry("c" * 40, "Empty commit"))
        assert (commits[0].files, commits[0].insertions, commits[0].deletions) == (0, 0, 0)

    def test_empty_output(self):
        """No output means no commits."""
        assert parse_log("") == []


class TestRemoteWebUrl:
    """Tests for remote_web_url()."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("git@github.com:acme/shop.git", ("https://github.com/acme/shop", "github", None)),
            ("https://github.com/acme/shop.git", ("https://github.com/acme/shop", "github", None)),
            (
                "https://user@bitbucket.org/acme/shop.git",
                ("https://bitbucket.org/acme/shop", "bitbucket", None),
            ),
            (
                "ssh://git@gitlab.com/acme/shop.git",
                ("https://gitlab.com/acme/shop", "gitlab", None),
            ),
        ],
    )
    def test_hosts(self, url, expected):
        """Clone URLs map to the web URL of the host."""
        assert remote_web_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "https://acme@dev.azure.com/acme/shop/_git/webapp",
            "git@ssh.dev.azure.com:v3/acme/shop/webapp",
        ],
    )
    def test_azure(self, url):
        """Azure DevOps remotes keep the project root for work items."""
        assert remote_web_url(url) == (
            "https://dev.azure.com/acme/shop/_git/webapp",
            "azure",
            "https://dev.azure.com/acme/shop",
        )


class TestRemote:
    """Tests for Remote link builders."""

    def test_github_links(self):
        """GitHub is the default convention."""
        remote = Remote(url="https://github.com/acme/shop")

        assert remote.get_commit_link("abc") == "https://github.com/acme/shop/commit/abc"
        assert remote.get_issue_link("7") == "https://github.com/acme/shop/issues/7"
        assert remote.get_merge_link("12") == "https://github.com/acme/shop/pull/12"
        assert remote.get_compare_link("v1.0.0", "v1.1.0") == (
            "https://github.com/acme/shop/compare/v1.0.0...v1.1.0"
        )

    def test_bitbucket_links(self):
        """Bitbucket uses its own paths and reversed compares."""
        remote = Remote(url="https://bitbucket.org/acme/shop", host="bitbucket")

        assert remote.get_commit_link("abc") == "https://bitbucket.org/acme/shop/commits/abc"
        assert remote.get_merge_link("12") == "https://bitbucket.org/acme/shop/pull-requests/12"
        assert remote.get_compare_link("v1.0.0", "v1.1.0") == (
            "https://bitbucket.org/acme/shop/compare/v1.1.0..v1.0.0"
        )

    def test_gitlab_merge_requests(self):
        """GitLab links merge requests."""
        remote = Remote(url="https://gitlab.com/acme/shop", host="gitlab")
        assert remote.get_merge_link("3") == "https://gitlab.com/acme/shop/merge_requests/3"

    def test_azure_links(self):
        """Azure DevOps links pull requests and work items."""
        web, host, root = remote_web_url("https://dev.azure.com/acme/shop/_git/webapp")
        remote = Remote(url=web, host=host, azure_root=root)

        assert remote.get_merge_link("5") == (
            "https://dev.azure.com/acme/shop/_git/webapp/pullrequest/5"
        )
        assert remote.get_issue_link("5") == "https://dev.azure.com/acme/shop/_workitems/edit/5"

    def test_url_overrides(self):
        """Configured URL templates win over the host."""
        remote = Remote(
            url="https://github.com/acme/shop",
            commit_url="https://git.example.com/c/{id}",
            compare_url="https://git.example.com/{from}/{to}",
        )

        assert remote.get_commit_link("abc") == "https://git.example.com/c/abc"
        assert remote.get_compare_link("v1", "v2") == "https://git.example.com/v1/v2"

    def test_no_remote_no_links(self):
        """Without a remote URL there are no links."""
        remote = Remote(url=None)

        assert remote.get_commit_link("abc") is None
        assert remote.get_compare_link("v1", "v2") is None


class TestGitRepository:
    """Tests for GitRepository."""

    def test_run_failure(self, tmp_path: Path):
        """A failing git command raises GitError with its stderr."""
        error = subprocess.CalledProcessError(
            128, ["git", "log"], stderr="fatal: not a git repository\n"
        )
        with patch("auto_changelog.vcs.git.subprocess.run", side_effect=error):
            with pytest.raises(GitError) as exc_info:
                GitRepository(tmp_path).run("log")

        assert str(exc_info.value) == (
            "git log failed with exit code 128: fatal: not a git repository"
        )
        assert exc_info.value.stderr == "fatal: not a git repository\n"

    def test_git_missing(self, tmp_path: Path):
        """A missing git executable raises GitError."""
        with patch("auto_changelog.vcs.git.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(GitError, match="git not found"):
                GitRepository(tmp_path).run("log")

    def test_fetch_remote(self, tmp_path: Path):
        """The remote URL is read from git config."""
        repo = GitRepository(tmp_path)
        url = "git@github.com:acme/shop.git\n"
        with patch.object(GitRepository, "run", return_value=url) as run:
            remote = repo.fetch_remote(ChangelogOptions(remote="upstream"))

        run.assert_called_once_with("config", "--get", "remote.upstream.url")
        assert remote.url == "https://github.com/acme/shop"
        assert remote.host == "github"

    def test_fetch_remote_missing(self, tmp_path: Path):
        """A missing remote disables host links but keeps overrides."""
        options = ChangelogOptions(issue_url="https://jira.example.com/browse/{id}")
        with patch.object(GitRepository, "run", side_effect=GitError("no remote")):
            remote = GitRepository(tmp_path).fetch_remote(options)

        assert remote.url is None
        assert remote.get_commit_link("abc") is None
        assert remote.get_issue_link("JIRA-1") == "https://jira.example.com/browse/JIRA-1"

    def test_fetch_tags_semver_order(self, tmp_path: Path):
        """Semver tags are sorted newest first with their ranges."""
        output = tag_lines("v1.2.0", "v1.10.0", "not-a-version", "v2.0.0-beta.1", "v1.2.1")
        with patch.object(GitRepository, "run", return_value=output):
            tags = GitRepository(tmp_path).fetch_tags(ChangelogOptions())

        assert [t.tag for t in tags] == ["v2.0.0-beta.1", "v1.10.0", "v1.2.1", "v1.2.0"]
        assert [t.diff for t in tags] == [
            "v1.10.0..v2.0.0-beta.1",
            "v1.2.1..v1.10.0",
            "v1.2.0..v1.2.1",
            "v1.2.0",
        ]
        assert [(t.major, t.minor) for t in tags] == [
            (True, True),
            (False, True),
            (False, False),
            (True, True),
        ]
        assert tags[0].date == "2021-03-04T12:00:00+00:00"

    def test_fetch_tags_prefix(self, tmp_path: Path):
        """Only tags with the prefix count; the prefix is not part of the version."""
        output = tag_lines("release-1.1.0", "v1.0.0", "release-1.0.0")
        with patch.object(GitRepository, "run", return_value=output):
            tags = GitRepository(tmp_path).fetch_tags(ChangelogOptions(tag_prefix="release-"))

        assert [t.tag for t in tags] == ["release-1.1.0", "release-1.0.0"]
        assert [t.version for t in tags] == ["1.1.0", "1.0.0"]

    def test_fetch_tags_pattern(self, tmp_path: Path):
        """A tag pattern selects tags in git order."""
        output = tag_lines("build-12", "v1.0.0", "build-11")
        with patch.object(GitRepository, "run", return_value=output):
            tags = GitRepository(tmp_path).fetch_tags(ChangelogOptions(tag_pattern=r"^build-\d+$"))

        assert [t.tag for t in tags] == ["build-12", "build-11"]
        assert tags[0].diff == "build-11..build-12"

    def test_get_commits_arguments(self, tmp_path: Path):
        """Extra git log arguments are appended."""
        with patch.object(GitRepository, "run", return_value="") as run:
            GitRepository(tmp_path).get_commits("v1.0.0..v1.1.0", "--no-merges --first-parent")

        args = run.call_args.args
        assert args[:3] == ("log", "v1.0.0..v1.1.0", "--shortstat")
        assert args[-2:] == ("--no-merges", "--first-parent")
