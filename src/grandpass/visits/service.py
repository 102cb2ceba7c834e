from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..common.datetime_utils import format_manila_datetime, manila_date, manila_month_bounds, manila_today, parse_instant
from ..common.validators import require_date_range
from ..core.enums import ReportFilter
from ..core.exceptions import ApiError, ValidationError
from ..core.logger import get_logger
from ..directory.model import Office, Professor
from ..directory.repository import OfficeRepository, ProfessorRepository
from ..visitors.repository import VisitorRepository
from .aggregator import group_visits, lookup_names, resolve_visitor_names
from .model import DepartmentVisitRow, GroupedVisit, OfficeVisit, RecordId, VisitorLog
from .repository import OfficeVisitRepository, VisitorLogRepository

logger = get_logger(__name__)

T = TypeVar("T")


def degrade(fetch: Callable[[], Sequence[T]], what: str) -> list[T]:
    try:
        return list(fetch())
    except ApiError as e:
        logger.warning("Could not load %s: %s", what, e)
        return []


def report_window(
    report_filter: ReportFilter,
    *,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[tuple[date, date]]:
    """Inclusive Manila-day window for a filter; None means no bound."""
    if report_filter == ReportFilter.RANGE:
        return require_date_range(date_from, date_to)
    if report_filter == ReportFilter.ALL:
        return None

    today = manila_today(now)
    if report_filter == ReportFilter.TODAY:
        return today, today
    return manila_month_bounds(today)


def in_window(value, window: Optional[tuple[date, date]]) -> bool:
    if window is None:
        return True
    day = manila_date(value)
    if day is None:
        return False
    start, end = window
    return start.isoformat() <= day <= end.isoformat()


def search(groups: Iterable[GroupedVisit], text: Optional[str]) -> list[GroupedVisit]:
    """Case-insensitive match on the visitor name or id."""
    needle = (text or "").strip().lower()
    if not needle:
        return list(groups)
    return [g for g in groups if needle in (g.visitor or "").lower() or needle in g.visitors_id.lower()]


def _sort_newest_first(rows: Iterable[OfficeVisit]) -> list[OfficeVisit]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(rows, key=lambda r: parse_instant(r.created_at) or oldest, reverse=True)


class VisitReportService:
    def __init__(
        self,
        visits: OfficeVisitRepository,
        logs: VisitorLogRepository,
        offices: OfficeRepository,
        professors: ProfessorRepository,
        visitors: VisitorRepository,
    ):
        self._visits = visits
        self._logs = logs
        self._offices = offices
        self._professors = professors
        self._visitors = visitors

    def _visitor_name(self, visitors_id: str) -> Optional[str]:
        visitor = self._visitors.get(visitors_id)
        return visitor.name if visitor else None

    def _lookups(self) -> tuple[dict[str, Office], dict[str, Professor], list[VisitorLog]]:
        """Offices, professors and visitor logs, fetched together; each degrades alone."""
        with ThreadPoolExecutor(max_workers=3) as pool:
            offices_f = pool.submit(degrade, self._offices.list_all, "offices")
            profs_f = pool.submit(degrade, self._professors.list_all, "professors")
            logs_f = pool.submit(degrade, self._logs.list_all, "visitor logs")
            offices, profs, logs = offices_f.result(), profs_f.result(), logs_f.result()
        return (
            {str(o.id): o for o in offices if o.id is not None},
            {str(p.id): p for p in profs if p.id is not None},
            logs,
        )

    def build_grouped_report(
        self,
        report_filter: ReportFilter,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[GroupedVisit]:
        """Visitation history for the admin dashboard.

        Raises ValidationError for a bad range before anything is fetched and
        ApiError when the office visits themselves cannot be loaded. Office,
        professor, log and visitor-name lookups only degrade the result.
        """
        window = report_window(report_filter, date_from=date_from, date_to=date_to, now=now)

        rows = [r for r in self._visits.list_all() if in_window(r.created_at, window)]
        if not rows:
            return []

        office_by_id, prof_by_id, logs = self._lookups()

        groups = group_visits(rows, office_by_id, prof_by_id, logs)
        resolve_visitor_names(groups, self._visitor_name)
        return groups

    def department_report(
        self,
        dept_id: Optional[RecordId],
        report_filter: ReportFilter = ReportFilter.TODAY,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[DepartmentVisitRow]:
        if dept_id is None or str(dept_id).strip() == "":
            raise ValidationError("No department is linked to this account.")
        try:
            wanted = int(str(dept_id).strip())
        except ValueError:
            raise ValidationError("No department is linked to this account.")

        window = report_window(report_filter, date_from=date_from, date_to=date_to, now=now)

        rows = []
        for row in self._visits.list_all():
            try:
                if int(str(row.dept_id)) != wanted:
                    continue
            except ValueError:
                continue
            if in_window(row.created_at, window):
                rows.append(row)
        rows = _sort_newest_first(rows)
        if not rows:
            return []

        names = lookup_names((r.visitors_id for r in rows), self._visitor_name)
        profs = {str(p.id): p for p in degrade(self._professors.list_all, "professors") if p.id is not None}

        out = []
        for row in rows:
            prof = profs.get(str(row.prof_id))
            professor = (prof.name if prof else None) or (str(row.prof_id) if row.prof_id else "-")
            out.append(
                DepartmentVisitRow(
                    id=row.id,
                    visitors_id=row.visitors_id,
                    visitor_name=names.get(row.visitors_id) or row.visitors_id,
                    professor=professor,
                    purpose=row.purpose or "-",
                    created_at=row.created_at,
                    date_time=format_manila_datetime(row.created_at),
                    tagged=row.is_tagged,
                )
            )
        return out

    def faculty_visits(self, prof_id: Optional[RecordId]) -> list[DepartmentVisitRow]:
        """Visits addressed to one professor, newest first."""
        if prof_id is None or str(prof_id).strip() == "":
            raise ValidationError("No professor is linked to this account.")

        rows = _sort_newest_first(self._visits.list_for_professor(prof_id))
        if not rows:
            return []

        names = lookup_names((r.visitors_id for r in rows), self._visitor_name)

        out = []
        for row in rows:
            out.append(
                DepartmentVisitRow(
                    id=row.id,
                    visitors_id=row.visitors_id,
                    visitor_name=names.get(row.visitors_id) or row.visitors_id,
                    professor="",
                    purpose=row.purpose or "-",
                    created_at=row.created_at,
                    date_time=format_manila_datetime(row.created_at),
                    tagged=row.is_tagged,
                )
            )
        return out
