"""Earliest time-in / latest time-out of one grouped visit.

Raw values are either bare ``HH:mm[:ss]`` clock times, which belong to the
group's Manila day, or complete timestamps, which are taken as they are.
Anything unparseable is ignored.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from ..common.datetime_utils import parse_instant
from ..core.constants import MANILA_UTC_OFFSET_HOURS

MANILA_OFFSET = timezone(timedelta(hours=MANILA_UTC_OFFSET_HOURS))

_BARE_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")


def to_instant(value: Any, day: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return parse_instant(value)

    text = str(value).strip()
    match = _BARE_TIME.match(text)
    if not match:
        return parse_instant(text)

    try:
        year, month, dom = (int(p) for p in day.split("-"))
        return datetime(
            year,
            month,
            dom,
            int(match.group(1)),
            int(match.group(2)),
            int(match.group(3) or 0),
            tzinfo=MANILA_OFFSET,
        )
    except ValueError:
        return None


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(MANILA_OFFSET).isoformat()


def reduce_times(day: str, time_ins: Iterable[Any], time_outs: Iterable[Any]) -> tuple[Optional[str], Optional[str]]:
    ins = [dt for dt in (to_instant(v, day) for v in time_ins) if dt is not None]
    outs = [dt for dt in (to_instant(v, day) for v in time_outs) if dt is not None]
    return _iso(min(ins) if ins else None), _iso(max(outs) if outs else None)
