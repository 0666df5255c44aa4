"""Configuration management for auto-changelog."""

from __future__ import annotations

from auto_changelog.config.loader import CONFIG_LAYERS, load_config
from auto_changelog.config.models import ChangelogOptions

__all__ = [
    "CONFIG_LAYERS",
    "ChangelogOptions",
    "load_config",
]
