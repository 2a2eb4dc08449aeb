# core/dates.py
"""
Date helpers shared by the audits.

Jira returns timestamps like ``2019-03-24T17:02:11.000+0000``; audits compare
calendar dates only ("strictly before the cutoff day").
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

DateLike = Union[date, datetime]


def parse_jira_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a Jira timestamp string. Empty values return None."""
    if not value or not value.strip():
        return None
    try:
        return date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        raise ValueError(f"Unrecognised Jira timestamp: {value!r}") from None


def parse_cutoff(value: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` cutoff date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Cutoff date must be YYYY-MM-DD, got {value!r}") from None


def as_date(value: DateLike) -> date:
    """Reduce a date/datetime to a calendar date (aware datetimes in UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def today_utc() -> date:
    return datetime.now(timezone.utc).date()
