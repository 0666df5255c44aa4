"""Progress reporting.

The pipeline and the publisher report progress through a
:class:`ProgressReporter`. Quiet runs (``--stdout``) get a
:class:`SilentReporter`; interactive runs get a :class:`ConsoleReporter`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

PREFIX = "auto-changelog: "


@runtime_checkable
class ProgressReporter(Protocol):
    """Receives human-readable progress messages."""

    def update(self, message: str) -> None: ...


class ConsoleReporter:
    """Print progress to a rich console, one status line per message."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True, highlight=False)

    def update(self, message: str) -> None:
        self.console.print(f"[dim]{PREFIX}[/]{escape(message)}")


class SilentReporter:
    """Discard progress messages."""

    def update(self, message: str) -> None:
        pass


class RecordingReporter:
    """Keep progress messages in memory."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def update(self, message: str) -> None:
        self.messages.append(message)
