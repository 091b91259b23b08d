"""
Date and time utility functions used across the project.

Notes:
- All "UTC" helpers use timezone-aware datetimes with `timezone.utc`.
- `to_utc` assumes naive datetimes are already in UTC and only attaches tzinfo
  (SQLite hands timestamps back without tzinfo).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator

UTC = timezone.utc


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def today_utc() -> date:
    """Return today's date in UTC."""
    return now_utc().date()


def to_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def compact_date(d: date) -> str:
    """Format a date as YYYYMMDD."""
    return d.strftime("%Y%m%d")


def daterange(start: date, end: date) -> Iterator[date]:
    """
    Yield all dates from start to end inclusive.
    If start > end, yields nothing.
    """
    if start > end:
        return
    for i in range((end - start).days + 1):
        yield start + timedelta(days=i)
