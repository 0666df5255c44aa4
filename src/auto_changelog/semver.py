"""Semantic version parsing for tag names and ``--latest-version``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from auto_changelog.exceptions import InvalidVersionError

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    def sort_key(self) -> tuple:
        """Precedence key: a prerelease sorts before its release."""
        pre = tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in self.prerelease)
        return (self.major, self.minor, self.patch, not self.prerelease, pre)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{'.'.join(self.prerelease)}"
        return base


def parse_semver(value: str) -> SemVer | None:
    """Parse ``1.2.3``, ``v1.2.3-beta.1`` etc.; ``None`` if not semver."""
    m = _SEMVER_RE.match(value.strip())
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre)


def is_valid_semver(value: str) -> bool:
    return parse_semver(value) is not None


def require_semver(value: str, option: str = "--latest-version") -> str:
    """Return ``value`` unchanged if it is semver, otherwise raise."""
    if not is_valid_semver(value):
        raise InvalidVersionError(f"{option} must be a valid semver version, got {value!r}")
    return value
