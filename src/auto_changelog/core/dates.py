"""Date helpers shared by the normalizer and the git history parser."""

from __future__ import annotations

from datetime import UTC, datetime

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def parse_date(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def nice_date(value: str) -> str:
    """Format a timestamp as ``D Month YYYY`` in UTC, e.g. ``4 March 2021``."""
    date = parse_date(value)
    return f"{date.day} {MONTH_NAMES[date.month - 1]} {date.year}"


def iso_date(value: str) -> str:
    """The ``YYYY-MM-DD`` part of a timestamp, in UTC."""
    return parse_date(value).date().isoformat()
