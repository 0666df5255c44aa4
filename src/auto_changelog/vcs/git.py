"""Git access for the live-history release source.

Git is called as a subprocess and its output parsed. Only read-only
commands are used.
"""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

from auto_changelog.exceptions import GitError
from auto_changelog.semver import parse_semver

if TYPE_CHECKING:
    from auto_changelog.config.models import ChangelogOptions

logger = logging.getLogger(__name__)

COMMIT_SEPARATOR = "__AUTO_CHANGELOG_COMMIT_SEPARATOR__"
MESSAGE_SEPARATOR = "__AUTO_CHANGELOG_MESSAGE_SEPARATOR__"
TAG_DIVIDER = "---"

_SHORTSTAT_RE = re.compile(
    r"(\d+) files? changed(?:, (\d+) insertions?\(\+\))?(?:, (\d+) deletions?\(-\))?"
)


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from ``git log``, before classification."""

    hash: str
    date: str
    author: str
    email: str
    message: str
    files: int = 0
    insertions: int = 0
    deletions: int = 0

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True)
class Tag:
    """A version tag, or a pseudo tag for unreleased/latest changes."""

    tag: str | None
    title: str
    date: str
    diff: str | None
    version: str | None = None
    major: bool = False
    minor: bool = False
    href: str | None = None


@dataclass(frozen=True)
class Remote:
    """Link builders for a hosted git remote.

    ``url`` is the web URL of the repository, or ``None`` when the
    remote is missing; explicit URL templates from the options win over
    the host conventions.
    """

    url: str | None
    host: str = "github"
    commit_url: str | None = None
    issue_url: str | None = None
    merge_url: str | None = None
    compare_url: str | None = None
    azure_root: str | None = field(default=None, repr=False)

    def get_commit_link(self, commit_id: str) -> str | None:
        if self.commit_url:
            return self.commit_url.replace("{id}", commit_id)
        if not self.url:
            return None
        if self.host == "bitbucket":
            return f"{self.url}/commits/{commit_id}"
        return f"{self.url}/commit/{commit_id}"

    def get_issue_link(self, issue_id: str) -> str | None:
        if self.issue_url:
            return self.issue_url.replace("{id}", issue_id)
        if not self.url:
            return None
        if self.host == "azure" and self.azure_root:
            return f"{self.azure_root}/_workitems/edit/{issue_id}"
        return f"{self.url}/issues/{issue_id}"

    def get_merge_link(self, merge_id: str) -> str | None:
        if self.merge_url:
            return self.merge_url.replace("{id}", merge_id)
        if not self.url:
            return None
        if self.host == "gitlab":
            return f"{self.url}/merge_requests/{merge_id}"
        if self.host == "bitbucket":
            return f"{self.url}/pull-requests/{merge_id}"
        if self.host == "azure":
            return f"{self.url}/pullrequest/{merge_id}"
        return f"{self.url}/pull/{merge_id}"

    def get_compare_link(self, start: str, end: str) -> str | None:
        if self.compare_url:
            return self.compare_url.replace("{from}", start).replace("{to}", end)
        if not self.url:
            return None
        if self.host == "bitbucket":
            return f"{self.url}/compare/{end}..{start}"
        if self.host == "azure":
            return (
                f"{self.url}/branches?baseVersion=GT{quote(end)}"
                f"&targetVersion=GT{quote(start)}&_a=commits"
            )
        return f"{self.url}/compare/{start}...{end}"


def remote_web_url(url: str) -> tuple[str, str, str | None]:
    """Turn a clone URL into ``(web_url, host, azure_root)``.

    Handles scp-style SSH (``git@github.com:owner/repo.git``),
    ``ssh://`` and ``https://`` URLs, including Azure DevOps.
    """
    url = url.strip().removesuffix(".git")

    # Azure DevOps: https://org@dev.azure.com/org/project/_git/repo
    # or git@ssh.dev.azure.com:v3/org/project/repo
    azure_ssh = re.match(
        r"^(?:ssh://)?[^@]+@ssh\.dev\.azure\.com[:/]v3/([^/]+)/([^/]+)/(.+)$", url
    )
    if azure_ssh:
        org, project, repo = azure_ssh.groups()
        root = f"https://dev.azure.com/{org}/{project}"
        return f"{root}/_git/{repo}", "azure", root
    azure_https = re.match(
        r"^https?://(?:[^@/]+@)?dev\.azure\.com/([^/]+)/([^/]+)/_git/(.+)$", url
    )
    if azure_https:
        org, project, repo = azure_https.groups()
        root = f"https://dev.azure.com/{org}/{project}"
        return f"{root}/_git/{repo}", "azure", root

    scp = re.match(r"^(?:ssh://)?(?:[^@/]+@)?([^:/]+)[:/](?:\d+/)?(.+)$", url)
    if url.startswith(("http://", "https://")):
        web = re.sub(r"^(https?://)[^@/]+@", r"\1", url)
    elif scp:
        web = f"https://{scp.group(1)}/{scp.group(2)}"
    else:
        web = url

    if "gitlab" in web:
        host = "gitlab"
    elif "bitbucket" in web:
        host = "bitbucket"
    else:
        host = "github"
    return web, host, None


class GitRepository:
    """Read-only access to a local git repository."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Path.cwd()

    def run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises:
            GitError: If git is missing or the command fails
        """
        cmd = ["git", *args]
        logger.debug("Running %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git not found on PATH") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr
            ) from e
        return result.stdout

    def fetch_remote(self, options: ChangelogOptions) -> Remote:
        """Build link helpers for the configured remote."""
        try:
            url = self.run("config", "--get", f"remote.{options.remote}.url").strip()
        except GitError:
            url = ""

        overrides = {
            "commit_url": options.commit_url,
            "issue_url": options.issue_url,
            "merge_url": options.merge_url,
            "compare_url": options.compare_url,
        }
        if not url:
            logger.debug("Remote %s has no URL, links disabled", options.remote)
            return Remote(url=None, **overrides)

        web, host, azure_root = remote_web_url(url)
        return Remote(url=web, host=host, azure_root=azure_root, **overrides)

    def fetch_tags(self, options: ChangelogOptions) -> list[Tag]:
        """Version tags, newest first, each with the range it covers."""
        output = self.run(
            "tag",
            "-l",
            "--sort=-creatordate",
            f"--format=%(refname:short){TAG_DIVIDER}%(creatordate:iso-strict)",
        )
        entries = []
        for line in output.splitlines():
            if TAG_DIVIDER not in line:
                continue
            name, date = line.rsplit(TAG_DIVIDER, 1)
            entries.append((name, date))

        if options.tag_pattern:
            pattern = re.compile(options.tag_pattern)
            selected = [(name, date, None) for name, date in entries if pattern.search(name)]
        else:
            selected = []
            for name, date in entries:
                if not name.startswith(options.tag_prefix):
                    continue
                semver = parse_semver(name.removeprefix(options.tag_prefix))
                if semver is not None:
                    selected.append((name, date, semver))
            selected.sort(key=lambda entry: entry[2].sort_key(), reverse=True)

        tags = []
        for index, (name, date, semver) in enumerate(selected):
            previous = selected[index + 1] if index + 1 < len(selected) else None
            prev_semver = previous[2] if previous else None
            tags.append(
                Tag(
                    tag=name,
                    title=name,
                    date=date,
                    diff=f"{previous[0]}..{name}" if previous else name,
                    version=name.removeprefix(options.tag_prefix),
                    major=semver is not None
                    and (prev_semver is None or semver.major != prev_semver.major),
                    minor=semver is not None
                    and (prev_semver is None or semver.minor != prev_semver.minor),
                )
            )
        return tags

    def get_tag_message(self, tag: str) -> str:
        """The annotation (or commit message) of a tag."""
        return self.run("tag", "-l", "--format=%(contents)", tag).strip()

    def get_commits(self, diff: str, append_git_log: str = "") -> list[RawCommit]:
        """Commits in a revision range, newest first."""
        args = [
            "log",
            diff,
            "--shortstat",
            f"--pretty=format:{COMMIT_SEPARATOR}%H%n%aI%n%an%n%ae%n%B{MESSAGE_SEPARATOR}",
            *shlex.split(append_git_log),
        ]
        return parse_log(self.run(*args))


def parse_log(output: str) -> list[RawCommit]:
    """Parse ``git log`` output produced with the separator format."""
    commits = []
    for block in output.split(COMMIT_SEPARATOR)[1:]:
        head, _, stats = block.partition(MESSAGE_SEPARATOR)
        lines = head.split("\n", 4)
        if len(lines) < 4:
            continue
        hash_, date, author, email = lines[:4]
        message = lines[4] if len(lines) > 4 else ""

        files = insertions = deletions = 0
        match = _SHORTSTAT_RE.search(stats)
        if match:
            files = int(match.group(1))
            insertions = int(match.group(2) or 0)
            deletions = int(match.group(3) or 0)

        commits.append(
            RawCommit(
                hash=hash_.strip(),
                date=date.strip(),
                author=author,
                email=email,
                message=message.strip(),
                files=files,
                insertions=insertions,
                deletions=deletions,
            )
        )
    return commits
