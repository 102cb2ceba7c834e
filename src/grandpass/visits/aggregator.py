"""Folds raw office-visit rows into one entry per visitor per Manila day."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import manila_date
from ..core.constants import GROUP_KEY_SEPARATOR
from ..core.exceptions import ApiError
from ..core.logger import get_logger
from ..directory.model import Office, Professor
from .model import GroupedVisit, OfficeVisit, OfficeVisitDetail, VisitorLog
from .time_reducer import reduce_times

logger = get_logger(__name__)

NameLookup = Callable[[str], Optional[str]]

MAX_LOOKUP_WORKERS = 8


def group_key(visitors_id: str, day: str) -> str:
    return f"{visitors_id}{GROUP_KEY_SEPARATOR}{day}"


def _office_label(row: OfficeVisit, office_by_id: Mapping[str, Office]) -> str:
    office = office_by_id.get(str(row.dept_id))
    if office and office.name:
        return office.name
    return "" if row.dept_id is None else str(row.dept_id)


def _professor_label(row: OfficeVisit, prof_by_id: Mapping[str, Professor]) -> str:
    prof = prof_by_id.get(str(row.prof_id))
    return prof.name if prof and prof.name else ""


def to_detail(row: OfficeVisit, office_by_id: Mapping[str, Office], prof_by_id: Mapping[str, Professor]) -> OfficeVisitDetail:
    return OfficeVisitDetail(
        dept_id=row.dept_id,
        office=_office_label(row, office_by_id),
        prof_id=row.prof_id,
        professor=_professor_label(row, prof_by_id),
        purpose=row.purpose,
        created_at=row.created_at,
        qr_tagged=row.qr_tagged is True,
    )


def group_visits(
    rows: Iterable[OfficeVisit],
    office_by_id: Mapping[str, Office],
    prof_by_id: Mapping[str, Professor],
    visitor_logs: Iterable[VisitorLog] = (),
) -> list[GroupedVisit]:
    """Group rows by (visitorsID, Manila day), newest day first.

    Rows whose ``createdAt`` cannot be parsed have no grouping key and are
    dropped. Same-day groups keep their insertion order.
    """
    groups: dict[str, GroupedVisit] = {}

    for row in rows:
        day = manila_date(row.created_at)
        if day is None:
            continue
        key = group_key(row.visitors_id, day)
        group = groups.get(key)
        if group is None:
            group = GroupedVisit(visitors_id=row.visitors_id, date=day, visitor=row.visitors_id)
            groups[key] = group
        group.offices.append(to_detail(row, office_by_id, prof_by_id))

    for group in groups.values():
        group.tagged = any(o.qr_tagged for o in group.offices)

    apply_visitor_times(groups, visitor_logs)

    return sorted(groups.values(), key=lambda g: g.date, reverse=True)


def apply_visitor_times(groups: Mapping[str, GroupedVisit], visitor_logs: Iterable[VisitorLog]) -> None:
    times: dict[str, tuple[list, list]] = {}
    for log in visitor_logs:
        day = manila_date(log.created_at)
        if day is None:
            continue
        ins, outs = times.setdefault(group_key(log.visitors_id, day), ([], []))
        if log.time_in:
            ins.append(log.time_in)
        if log.time_out:
            outs.append(log.time_out)

    for key, (ins, outs) in times.items():
        group = groups.get(key)
        if group is not None:
            group.time_in_iso, group.time_out_iso = reduce_times(group.date, ins, outs)


def _safe_lookup(lookup: NameLookup, visitors_id: str) -> Optional[str]:
    try:
        return lookup(visitors_id)
    except ApiError as e:
        logger.warning("Name lookup for visitor %s failed: %s", visitors_id, e)
        return None


def lookup_names(visitor_ids: Iterable[str], lookup: NameLookup) -> dict[str, Optional[str]]:
    """Resolve display names concurrently; failed lookups map to None."""
    ids = list(dict.fromkeys(v for v in visitor_ids if v))
    if not ids:
        return {}

    with ThreadPoolExecutor(max_workers=min(MAX_LOOKUP_WORKERS, len(ids))) as pool:
        futures = {vid: pool.submit(_safe_lookup, lookup, vid) for vid in ids}
        return {vid: future.result() for vid, future in futures.items()}


def resolve_visitor_names(groups: Sequence[GroupedVisit], lookup: NameLookup) -> None:
    names = lookup_names((g.visitors_id for g in groups), lookup)
    for group in groups:
        group.visitor = names.get(group.visitors_id) or group.visitors_id
