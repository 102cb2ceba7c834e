from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import pytest

from grandpass.core.enums import ReportFilter
from grandpass.core.exceptions import TransportError, ValidationError
from grandpass.directory.model import Office, Professor
from grandpass.visitors.model import Visitor
from grandpass.visits.model import OfficeVisit, VisitorLog
from grandpass.visits.service import VisitReportService, report_window, search

# 2025-01-05 10:00 in Manila
NOW = datetime(2025, 1, 5, 2, 0, tzinfo=timezone.utc)


@dataclass
class InMemoryVisits:
    rows: list[OfficeVisit] = field(default_factory=list)
    calls: int = 0

    def list_all(self):
        self.calls += 1
        return list(self.rows)

    def list_for_professor(self, prof_id):
        return [r for r in self.rows if str(r.prof_id) == str(prof_id)]


@dataclass
class InMemoryLogs:
    logs: list[VisitorLog] = field(default_factory=list)

    def list_all(self):
        return list(self.logs)


@dataclass
class InMemoryOffices:
    offices: list[Office] = field(default_factory=list)
    error: Optional[Exception] = None

    def list_all(self):
        if self.error:
            raise self.error
        return list(self.offices)


@dataclass
class InMemoryProfessors:
    professors: list[Professor] = field(default_factory=list)

    def list_all(self):
        return list(self.professors)


@dataclass
class InMemoryVisitors:
    by_id: dict[str, Visitor] = field(default_factory=dict)

    def get(self, visitors_id: str) -> Optional[Visitor]:
        return self.by_id.get(visitors_id)


def _row(vid, created_at, dept_id=5, prof_id=None, tagged=None, purpose=None, row_id=None):
    return OfficeVisit(
        id=row_id,
        visitors_id=vid,
        dept_id=dept_id,
        prof_id=prof_id,
        purpose=purpose,
        created_at=created_at,
        qr_tagged=tagged,
    )


def _service(rows, *, offices=None, logs=(), visitors=None, professors=()):
    visits = InMemoryVisits(list(rows))
    service = VisitReportService(
        visits,
        InMemoryLogs(list(logs)),
        offices or InMemoryOffices([Office(5, "Registrar"), Office(7, "Library")]),
        InMemoryProfessors(list(professors)),
        InMemoryVisitors(visitors or {}),
    )
    return service, visits


def test_range_with_reversed_dates_fetches_nothing():
    service, visits = _service([_row("A", "2025-01-05T01:00:00Z")])

    with pytest.raises(ValidationError, match="first date is before"):
        service.build_grouped_report(ReportFilter.RANGE, "2025-02-01", "2025-01-01", now=NOW)

    assert visits.calls == 0


def test_range_requires_both_dates():
    service, visits = _service([])

    with pytest.raises(ValidationError):
        service.build_grouped_report(ReportFilter.RANGE, "2025-01-01", None, now=NOW)

    assert visits.calls == 0


def test_report_window_for_filters():
    assert report_window(ReportFilter.ALL, now=NOW) is None
    today = report_window(ReportFilter.TODAY, now=NOW)
    assert [d.isoformat() for d in today] == ["2025-01-05", "2025-01-05"]
    month = report_window(ReportFilter.MONTH, now=NOW)
    assert [d.isoformat() for d in month] == ["2025-01-01", "2025-01-31"]


def test_grouped_report_filters_to_today_and_resolves_names():
    service, _ = _service(
        [
            _row("A", "2025-01-05T01:00:00Z", purpose="Enrollment"),
            _row("A", "2025-01-05T03:00:00Z", dept_id=7, tagged=True),
            _row("B", "2025-01-03T01:00:00Z"),
        ],
        visitors={"A": Visitor("A", "Ana Reyes")},
        logs=[VisitorLog("A", "2025-01-05T00:30:00Z", time_in="08:40")],
    )

    groups = service.build_grouped_report(ReportFilter.TODAY, now=NOW)

    assert len(groups) == 1
    group = groups[0]
    assert (group.visitors_id, group.date, group.visitor) == ("A", "2025-01-05", "Ana Reyes")
    assert [o.office for o in group.offices] == ["Registrar", "Library"]
    assert group.tagged is True
    assert group.time_in_iso == "2025-01-05T08:40:00+08:00"


def test_office_lookup_failure_degrades_to_raw_ids():
    service, _ = _service(
        [_row("A", "2025-01-05T01:00:00Z")],
        offices=InMemoryOffices(error=TransportError("down")),
    )

    groups = service.build_grouped_report(ReportFilter.ALL, now=NOW)

    assert groups[0].offices[0].office == "5"
    assert groups[0].visitor == "A"


def test_no_rows_in_window_gives_empty_report():
    service, _ = _service([_row("A", "2024-12-01T01:00:00Z")])

    assert service.build_grouped_report(ReportFilter.TODAY, now=NOW) == []


def test_search_matches_name_or_id():
    service, _ = _service(
        [_row("2025010512345678", "2025-01-05T01:00:00Z"), _row("B", "2025-01-05T01:00:00Z")],
        visitors={"B": Visitor("B", "Carlo Dizon")},
    )
    groups = service.build_grouped_report(ReportFilter.ALL, now=NOW)

    assert [g.visitors_id for g in search(groups, "carlo")] == ["B"]
    assert [g.visitors_id for g in search(groups, "1234")] == ["2025010512345678"]
    assert len(search(groups, "  ")) == 2


def test_department_report_matches_numeric_department():
    service, _ = _service(
        [
            _row("A", "2025-01-05T01:00:00Z", dept_id="5", prof_id=11, purpose="Consult", row_id=1),
            _row("B", "2025-01-05T03:00:00Z", dept_id=5, tagged=True, row_id=2),
            _row("C", "2025-01-05T02:00:00Z", dept_id=7, row_id=3),
            _row("D", "2025-01-05T02:00:00Z", dept_id="abc", row_id=4),
        ],
        visitors={"A": Visitor("A", "Ana Reyes")},
        professors=[Professor(11, "Ben Santos")],
    )

    rows = service.department_report("5", ReportFilter.TODAY, now=NOW)

    assert [r.id for r in rows] == [2, 1]
    newest, older = rows
    assert (newest.visitor_name, newest.professor, newest.purpose, newest.status) == ("B", "-", "-", "Tagged")
    assert (older.visitor_name, older.professor, older.purpose, older.status) == (
        "Ana Reyes",
        "Ben Santos",
        "Consult",
        "Pending",
    )
    assert older.date_time == "1/5/2025, 9:00:00 AM"


def test_department_report_requires_linked_department():
    service, visits = _service([])

    with pytest.raises(ValidationError, match="No department"):
        service.department_report(None, now=NOW)
    with pytest.raises(ValidationError):
        service.department_report("office-five", now=NOW)
    assert visits.calls == 0


def test_faculty_visits_lists_professor_rows_newest_first():
    service, _ = _service(
        [
            _row("A", "2025-01-04T01:00:00Z", prof_id=11),
            _row("B", "2025-01-05T01:00:00Z", prof_id=11),
            _row("C", "2025-01-05T01:00:00Z", prof_id=12),
        ],
    )

    rows = service.faculty_visits(11)

    assert [r.visitors_id for r in rows] == ["B", "A"]
    assert all(r.professor == "" for r in rows)


def test_faculty_visits_requires_professor():
    service, _ = _service([])

    with pytest.raises(ValidationError, match="No professor"):
        service.faculty_visits("")


def test_lookups_for_one_report_are_issued_together():
    # each lookup waits for the other two; sequential fetching would time out
    barrier = threading.Barrier(3, timeout=5)

    class WaitingOffices(InMemoryOffices):
        def list_all(self):
            barrier.wait()
            return super().list_all()

    class WaitingProfessors(InMemoryProfessors):
        def list_all(self):
            barrier.wait()
            return super().list_all()

    class WaitingLogs(InMemoryLogs):
        def list_all(self):
            barrier.wait()
            return super().list_all()

    service = VisitReportService(
        InMemoryVisits([_row("A", "2025-01-05T01:00:00Z")]),
        WaitingLogs([VisitorLog("A", "2025-01-05T00:30:00Z", time_in="08:40")]),
        WaitingOffices([Office(5, "Registrar")]),
        WaitingProfessors(),
        InMemoryVisitors(),
    )

    groups = service.build_grouped_report(ReportFilter.ALL, now=NOW)

    assert groups[0].offices[0].office == "Registrar"
    assert groups[0].time_in_iso == "2025-01-05T08:40:00+08:00"
    assert not barrier.broken
