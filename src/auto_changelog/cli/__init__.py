"""Command-line interface for auto-changelog."""

from __future__ import annotations

from auto_changelog.cli.app import app, main

__all__ = ["app", "main"]
