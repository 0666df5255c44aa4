"""Command-line interface for auto-changelog."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from auto_changelog import __version__
from auto_changelog.cli.commands.generate import run_generate

console = Console(highlight=False)
err_console = Console(stderr=True)

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Generate a changelog from git history or an Azure DevOps pull-request feed.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def changelog(
    # Release sources
    input: Path | None = typer.Option(
        None, "--input", help="Use a pre-processed releases JSON file"
    ),
    azure_api: str | None = typer.Option(
        None, "--azure-api", help="Azure DevOps pull-request API endpoint"
    ),
    azure_user: str | None = typer.Option(
        None, "--azure-user", help="Credential for the feed as username:password"
    ),
    azure_web_url: str | None = typer.Option(
        None, "--azure-web-url", help="Project web root for pull-request links"
    ),
    # Output
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file, default: CHANGELOG.md"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Config file location, default: .auto-changelog"
    ),
    template: str | None = typer.Option(
        None, "--template", "-t", help="Template [compact, keepachangelog, json] or a file"
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Output changelog to stdout"),
    hide_credit: bool = typer.Option(False, "--hide-credit", help="Hide the credit line"),
    # Git history
    remote: str | None = typer.Option(
        None, "--remote", "-r", help="Git remote to use for links, default: origin"
    ),
    package: bool = typer.Option(
        False, "--package", "-p", help="Use the version in pyproject.toml or package.json"
    ),
    package_file: Path | None = typer.Option(
        None, "--package-file", help="Use the version from this manifest file"
    ),
    latest_version: str | None = typer.Option(
        None, "--latest-version", "-v", help="Use this version as the latest release"
    ),
    unreleased: bool = typer.Option(
        False, "--unreleased", "-u", help="Include a section for unreleased changes"
    ),
    unreleased_only: bool = typer.Option(
        False, "--unreleased-only", help="Only output unreleased changes"
    ),
    commit_limit: str | None = typer.Option(
        None, "--commit-limit", "-l", help="Commits per release or 'false', default: 3"
    ),
    backfill_limit: str | None = typer.Option(
        None, "--backfill-limit", "-b", help="Commits for empty releases, default: 3"
    ),
    commit_url: str | None = typer.Option(None, "--commit-url", help="Use {id} for commit id"),
    issue_url: str | None = typer.Option(
        None, "--issue-url", "-i", help="Use {id} for issue id"
    ),
    merge_url: str | None = typer.Option(None, "--merge-url", help="Use {id} for merge id"),
    compare_url: str | None = typer.Option(
        None, "--compare-url", help="Use {from} and {to} for tags"
    ),
    issue_pattern: str | None = typer.Option(None, "--issue-pattern", help="Issue regex"),
    breaking_pattern: str | None = typer.Option(
        None, "--breaking-pattern", help="Breaking change regex"
    ),
    merge_pattern: str | None = typer.Option(None, "--merge-pattern", help="Merge regex"),
    ignore_commit_pattern: str | None = typer.Option(
        None, "--ignore-commit-pattern", help="Commits to leave out"
    ),
    tag_pattern: str | None = typer.Option(None, "--tag-pattern", help="Version tag regex"),
    tag_prefix: str | None = typer.Option(None, "--tag-prefix", help="Version tag prefix"),
    starting_version: str | None = typer.Option(
        None, "--starting-version", help="Earliest version to include"
    ),
    sort_commits: str | None = typer.Option(
        None, "--sort-commits", help="Sort by [relevance, date, date-desc]"
    ),
    release_summary: bool = typer.Option(
        False, "--release-summary", help="Use the tag message body as release summary"
    ),
    append_git_log: str | None = typer.Option(
        None, "--append-git-log", help="Extra arguments for git log"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Generate a changelog."""
    _setup_logging(verbose)

    overrides = {
        "input": input,
        "azure_api": azure_api,
        "azure_user": azure_user,
        "azure_web_url": azure_web_url,
        "output": output,
        "config": config,
        "template": template,
        "remote": remote,
        "package": package_file or (True if package else None),
        "latest_version": latest_version,
        "commit_limit": commit_limit,
        "backfill_limit": backfill_limit,
        "commit_url": commit_url,
        "issue_url": issue_url,
        "merge_url": merge_url,
        "compare_url": compare_url,
        "issue_pattern": issue_pattern,
        "breaking_pattern": breaking_pattern,
        "merge_pattern": merge_pattern,
        "ignore_commit_pattern": ignore_commit_pattern,
        "tag_pattern": tag_pattern,
        "tag_prefix": tag_prefix,
        "starting_version": starting_version,
        "sort_commits": sort_commits,
        "append_git_log": append_git_log,
        # Flags only override when given
        "stdout": stdout or None,
        "hide_credit": hide_credit or None,
        "unreleased": unreleased or None,
        "unreleased_only": unreleased_only or None,
        "release_summary": release_summary or None,
    }
    run_generate(overrides, console, err_console)


def main() -> None:
    app()
