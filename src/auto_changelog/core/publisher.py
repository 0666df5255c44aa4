"""Write the rendered changelog.

An existing changelog may contain the marker line
``<!-- auto-changelog-above -->``. When it does, the new changelog is
written above the marker and everything from the marker onward is kept
verbatim, so hand-written history below it survives regeneration, even
where it is not valid UTF-8.
Anything above the marker is replaced. Without a marker the file is
overwritten.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from auto_changelog.progress import ProgressReporter

PREPEND_TOKEN = "<!-- auto-changelog-above -->"


class PublishMode(str, Enum):
    """How the changelog reached its destination."""

    STDOUT = "stdout"
    WRITTEN = "written"
    PREPENDED = "prepended"


@dataclass(frozen=True)
class PublishResult:
    mode: PublishMode
    path: Path | None
    size: int


def format_bytes(size: int) -> str:
    """Whole kilobytes, rounded up, never less than 1.

    >>> format_bytes(1500)
    '2 kB'
    >>> format_bytes(100)
    '1 kB'
    """
    return f"{max(1, math.ceil(size / 1024))} kB"


def merge_with_existing(changelog: str, existing: str) -> str | None:
    """Prepend ``changelog`` to the marker section of ``existing``.

    Returns ``None`` when ``existing`` has no marker.
    """
    index = existing.find(PREPEND_TOKEN)
    if index == -1:
        return None
    return f"{changelog}\n{existing[index:]}"


def publish(
    changelog: str,
    output: Path,
    reporter: ProgressReporter,
    *,
    stdout: bool = False,
    stream: TextIO | None = None,
) -> PublishResult:
    """Publish a rendered changelog.

    Args:
        changelog: Rendered changelog text
        output: Destination file, ignored in stdout mode
        reporter: Receives the size message
        stdout: Write to ``stream`` instead of a file
        stream: Stream for stdout mode, defaults to ``sys.stdout``

    Returns:
        What was done and how many bytes the new changelog holds

    Raises:
        OSError: If the destination cannot be read or written
    """
    size = len(changelog.encode("utf-8"))

    if stdout:
        (stream or sys.stdout).write(changelog)
        return PublishResult(PublishMode.STDOUT, None, size)

    content = changelog
    mode = PublishMode.WRITTEN
    if output.exists():
        existing = output.read_text(encoding="utf-8", errors="surrogateescape")
        merged = merge_with_existing(changelog, existing)
        if merged is not None:
            content = merged
            mode = PublishMode.PREPENDED

    output.write_text(content, encoding="utf-8", errors="surrogateescape", newline="")
    reporter.update(f"{format_bytes(size)} {mode.value} to {output}")
    return PublishResult(mode, output, size)
