"""Release and commit data model.

These are the shapes handed to templates. They are immutable once built
and serialise with camelCase keys (``shortHash``, ``niceDate``...) so that
``releases.json`` files written by the JavaScript auto-changelog can be
used as ``--input`` and vice versa.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class _Frozen(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Fix(_Frozen):
    """An issue a commit claims to fix."""

    id: str
    href: str


class Commit(_Frozen):
    """One contribution within a release."""

    hash: str
    # The JavaScript tool writes "shorthash"
    short_hash: str = Field(
        validation_alias=AliasChoices("shortHash", "short_hash", "shorthash"),
        serialization_alias="shortHash",
    )
    author: str
    email: str
    subject: str
    message: str = ""
    date: str
    nice_date: str
    tag: str | None = None
    branch: str | None = None
    type: str | None = None
    work_item_id: str | None = None
    fixes: tuple[Fix, ...] | None = None
    href: str | None = None
    breaking: bool = False
    files: int = 0
    insertions: int = 0
    deletions: int = 0
    merge: Merge | None = None

    @field_validator("message", mode="before")
    @classmethod
    def empty_message(cls, value: object) -> object:
        """A pull request without description is stored as ``null``."""
        return "" if value is None else value


class Merge(_Frozen):
    """Merge linkage: the pull request a merge commit brought in."""

    id: str
    message: str
    href: str
    author: str
    commit: Commit | None = None


class Release(_Frozen):
    """One published (tagged) or unreleased version."""

    tag: str | None = None
    title: str
    version: str | None = None
    date: str
    iso_date: str
    nice_date: str
    summary: str | None = None
    major: bool = False
    href: str | None = None
    fixes: tuple[Commit, ...] = ()
    merges: tuple[Commit, ...] = ()
    commits: tuple[Commit, ...] = ()


Commit.model_rebuild()

ReleaseList = TypeAdapter(list[Release])


def dump_releases(releases: list[Release]) -> str:
    """Serialise releases to the camelCase JSON release-file format."""
    return ReleaseList.dump_json(releases, by_alias=True, indent=2).decode("utf-8")


def load_releases(data: str | bytes) -> list[Release]:
    """Parse a JSON release file. Raises ``pydantic.ValidationError``."""
    return ReleaseList.validate_json(data)
