"""Timestamp parsing helpers.

Formats are passed per call; nothing here holds formatter state.
"""
from __future__ import annotations

import datetime as dt

# Twitter REST v1.1, e.g. "Wed Aug 27 13:08:45 +0000 2008"
TWITTER_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def parse_timestamp(value: str | None, fmt: str) -> dt.datetime | None:
    """Parse ``value`` with ``fmt``; None when absent or not matching."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = dt.datetime.strptime(value.strip(), fmt)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def parse_epoch_millis(value: str | int | None) -> dt.datetime | None:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    if value is None or value == "":
        return None
    try:
        millis = int(value)
        return dt.datetime.fromtimestamp(millis / 1000, tz=dt.timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
