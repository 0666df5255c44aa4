"""External pull-request feeds."""

from __future__ import annotations

from auto_changelog.feeds.azure import encode_basic_auth, fetch_pull_requests

__all__ = ["encode_basic_auth", "fetch_pull_requests"]
