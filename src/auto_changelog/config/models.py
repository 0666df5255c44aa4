"""Configuration models for auto-changelog.

All options live on a single flat :class:`ChangelogOptions` model. The
same field names are accepted in snake_case (pyproject.toml, CLI) and in
camelCase (``.auto-changelog`` and ``package.json``), which keeps the JSON
config files of the JavaScript auto-changelog working unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CONFIG_FILE = ".auto-changelog"
DEFAULT_OUTPUT = "CHANGELOG.md"

SortCommits = Literal["relevance", "date", "date-desc"]
Limit = int | Literal[False]


class ChangelogOptions(BaseModel):
    """Resolved options for one changelog run."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    # Output
    output: Path = Field(default=Path(DEFAULT_OUTPUT), description="Changelog file")
    stdout: bool = Field(default=False, description="Write the changelog to stdout")
    template: str = Field(default="compact", description="Template name or path")
    hide_credit: bool = False
    replace_text: dict[str, str] = Field(default_factory=dict)

    # Config location
    config: Path = Field(default=Path(DEFAULT_CONFIG_FILE), description="Dotfile config")

    # Release sources
    input: Path | None = Field(default=None, description="Pre-processed releases JSON")
    azure_api: str | None = Field(default=None, description="Pull-request API endpoint")
    azure_user: str | None = Field(default=None, description="username:password")
    azure_web_url: str | None = Field(default=None, description="Web root for PR links")
    fix_types: list[str] = Field(default_factory=lambda: ["bug"])
    feature_types: list[str] = Field(default_factory=lambda: ["feature"])

    # Git history
    remote: str = "origin"
    package: bool | Path = False
    latest_version: str | None = None
    unreleased: bool = False
    unreleased_only: bool = False
    commit_limit: Limit = 3
    backfill_limit: Limit = 3
    commit_url: str | None = None
    issue_url: str | None = None
    merge_url: str | None = None
    compare_url: str | None = None
    issue_pattern: str | None = None
    breaking_pattern: str | None = None
    merge_pattern: str | None = None
    ignore_commit_pattern: str | None = None
    tag_pattern: str | None = None
    tag_prefix: str = ""
    starting_version: str | None = None
    sort_commits: SortCommits = "relevance"
    release_summary: bool = False
    append_git_log: str = ""

    @field_validator("commit_limit", "backfill_limit", mode="before")
    @classmethod
    def parse_limit(cls, value: object) -> object:
        """Accept ``"false"`` and numeric strings like the CLI does."""
        if isinstance(value, str):
            if value == "false":
                return False
            return int(value)
        return value

    @property
    def has_azure_feed(self) -> bool:
        """Both the endpoint and the credential are configured."""
        return bool(self.azure_api and self.azure_user)


def field_name_for(key: str) -> str:
    """Map a config key in any accepted spelling to its field name.

    ``commitLimit``, ``commit-limit`` and ``commit_limit`` all map to
    ``commit_limit``. Unknown keys are returned snake-cased so that
    validation reports them.
    """
    key = key.replace("-", "_")
    if key in ChangelogOptions.model_fields:
        return key
    for name, info in ChangelogOptions.model_fields.items():
        if info.alias == key:
            return name
    return key
