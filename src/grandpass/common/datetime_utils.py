"""Manila-time helpers.

All grouping and filtering happens on the Manila calendar day (UTC+8, no DST).
Backend timestamps arrive as ISO strings; naive values are taken as UTC.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Any, Optional

import pytz

from ..core.constants import MANILA_TZ

MANILA = pytz.timezone(MANILA_TZ)


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse a backend timestamp into an aware datetime, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_manila(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(MANILA)


def manila_date(value: Any) -> Optional[str]:
    """Manila calendar day (YYYY-MM-DD) of a timestamp, None if unparseable."""
    dt = parse_instant(value)
    if dt is None:
        return None
    return to_manila(dt).strftime("%Y-%m-%d")


def manila_today(now: Optional[datetime] = None) -> date:
    return to_manila(now or now_utc()).date()


def manila_month_bounds(day: date) -> tuple[date, date]:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def format_manila_datetime(value: Any) -> str:
    """Display form, e.g. ``1/5/2025, 9:15:00 AM``."""
    if value is None or value == "":
        return "-"
    dt = parse_instant(value)
    if dt is None:
        return str(value)
    local = to_manila(dt)
    clock = local.strftime("%I:%M:%S %p").lstrip("0")
    return f"{local.month}/{local.day}/{local.year}, {clock}"
