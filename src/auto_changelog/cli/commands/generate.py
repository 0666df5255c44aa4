"""Implementation of the changelog command.

Resolves the options, picks a progress reporter and runs the pipeline.
Every failure is printed to the error console and exits with status 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape

from auto_changelog.config import load_config
from auto_changelog.core.changelog import generate_changelog
from auto_changelog.exceptions import AutoChangelogError
from auto_changelog.progress import ConsoleReporter, ProgressReporter, SilentReporter

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from auto_changelog.config.models import ChangelogOptions


def make_reporter(options: ChangelogOptions, console: Console) -> ProgressReporter:
    """Silent when the changelog itself goes to stdout."""
    if options.stdout:
        return SilentReporter()
    return ConsoleReporter(console)


def run_generate(
    overrides: dict[str, Any],
    console: Console,
    err_console: Console,
    cwd: Path | None = None,
) -> None:
    """Run the changelog command.

    Args:
        overrides: Options given on the command line, ``None`` for unset
        console: Console for progress output
        err_console: Console for error output
        cwd: Project directory holding the config files
    """
    try:
        options = load_config(overrides, cwd)
    except AutoChangelogError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    reporter = make_reporter(options, console)

    try:
        generate_changelog(options, reporter)
    except AutoChangelogError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e
    except OSError as e:
        err_console.print(f"[red]Error writing changelog:[/] {escape(str(e))}")
        raise SystemExit(1) from e
