"""Exception hierarchy for auto-changelog.

Every error raised on purpose by the package derives from
:class:`AutoChangelogError`, so the CLI can report them uniformly
and exit with a non-zero status.
"""

from __future__ import annotations


class AutoChangelogError(Exception):
    """Base class for all auto-changelog errors."""


# Configuration


class ConfigError(AutoChangelogError):
    """Invalid or missing configuration."""


class ConfigNotFoundError(ConfigError):
    """A required configuration or manifest file does not exist."""


class ConfigValidationError(ConfigError):
    """A configuration layer could not be parsed or validated."""


class InvalidVersionError(ConfigError):
    """A version string supplied by the user is not valid semver."""


# Release data


class MalformedRecordError(AutoChangelogError):
    """A raw pull-request record lacks an expected field."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class EmptyFeedError(AutoChangelogError):
    """The pull-request feed returned no records to build a release from."""


class FeedError(AutoChangelogError):
    """Fetching or decoding the pull-request feed failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReleaseFileError(AutoChangelogError):
    """A release file is missing or does not hold a valid release list."""


# Collaborators


class GitError(AutoChangelogError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.args[0]}: {self.stderr.strip()}"
        return str(self.args[0])


class TemplateError(AutoChangelogError):
    """A changelog template could not be found or rendered."""
