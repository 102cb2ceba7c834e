from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from grandpass.core.exceptions import HttpStatusError, TransportError, ValidationError
from grandpass.directory.model import Office, Professor
from grandpass.visitors.model import PlannedVisit, RegistrationForm, Visitor
from grandpass.visitors.service import (
    RegistrationService,
    VisitorPassService,
    VisitorStatsService,
    generate_visitor_id,
    qr_png,
)
from grandpass.visits.model import OfficeVisit

# 2025-01-05 07:30 in Manila, still the 4th in UTC
NOW = datetime(2025, 1, 4, 23, 30, tzinfo=timezone.utc)


@dataclass
class InMemoryVisitors:
    by_id: dict[str, Visitor] = field(default_factory=dict)
    created: list[dict] = field(default_factory=list)
    create_error: Optional[Exception] = None
    get_error: Optional[Exception] = None
    list_error: Optional[Exception] = None
    created_on: dict[date, int] = field(default_factory=dict)

    def get(self, visitors_id):
        if self.get_error:
            raise self.get_error
        return self.by_id.get(visitors_id)

    def create(self, payload):
        if self.create_error:
            raise self.create_error
        self.created.append(payload)
        return {"message": "created"}

    def list_created_on(self, day):
        if self.list_error:
            raise self.list_error
        return [Visitor(str(i), None) for i in range(self.created_on.get(day, 0))]

    def list_created_between(self, start, end):
        if self.list_error:
            raise self.list_error
        total = sum(n for d, n in self.created_on.items() if start <= d <= end)
        return [Visitor(str(i), None) for i in range(total)]


@dataclass
class InMemoryLogs:
    error: Optional[Exception] = None
    created: list[str] = field(default_factory=list)

    def create(self, visitors_id):
        if self.error:
            raise self.error
        self.created.append(visitors_id)


@dataclass
class InMemoryOffices:
    offices: list[Office] = field(default_factory=list)

    def list_all(self):
        return list(self.offices)


@dataclass
class InMemoryProfessors:
    by_office: dict[str, list[Professor]] = field(default_factory=dict)
    failing_offices: set = field(default_factory=set)

    def list_by_department(self, office_id):
        if office_id in self.failing_offices:
            raise TransportError("down")
        return self.by_office.get(office_id, [])

    def list_all(self):
        return [p for profs in self.by_office.values() for p in profs]


@dataclass
class InMemoryVisits:
    rows: list[OfficeVisit] = field(default_factory=list)
    error: Optional[Exception] = None

    def list_for_visitor(self, visitors_id):
        if self.error:
            raise self.error
        return [r for r in self.rows if r.visitors_id == visitors_id]


def _form(**overrides):
    values = dict(
        first_name="Ana",
        middle_name="",
        last_name="Reyes",
        gender="Female",
        birth_date="2000-02-29",
        email="ana@example.com",
        phone="09171234567",
        purpose="Enrollment",
        office_ids=["5", "7"],
        professor_by_office={"5": "11"},
        offices={"5": "Registrar", "7": "Library"},
        professor_names={"11": "Ben Santos"},
    )
    values.update(overrides)
    return RegistrationForm(**values)


def test_visitor_id_is_manila_date_plus_eight_digits():
    visitor_id = generate_visitor_id(NOW, rng=random.Random(1))

    assert re.fullmatch(r"\d{16}", visitor_id)
    assert visitor_id.startswith("20250105")


def test_visitor_ids_vary():
    rng = random.Random(3)
    ids = {generate_visitor_id(NOW, rng=rng) for _ in range(20)}

    assert len(ids) > 1


def test_qr_png_is_png():
    assert qr_png("2025010512345678").startswith(b"\x89PNG")


def test_register_sends_payload_and_creates_entry_log():
    visitors, logs = InMemoryVisitors(), InMemoryLogs()
    service = RegistrationService(visitors, logs, InMemoryOffices(), InMemoryProfessors())

    visitor_id = service.register(_form(), now=NOW)

    payload = visitors.created[0]
    assert payload["visitorsID"] == visitor_id
    assert (payload["first_name"], payload["last_name"], payload["suffix"]) == ("Ana", "Reyes", "")
    assert payload["purpose_of_visit"] == "Enrollment"
    assert payload["faculty_to_visit"] == [
        {"office": "Registrar", "professor": "Ben Santos"},
        {"office": "Library", "professor": None},
    ]
    assert logs.created == [visitor_id]


def test_register_validates_before_calling_backend():
    visitors = InMemoryVisitors()
    service = RegistrationService(visitors, InMemoryLogs(), InMemoryOffices(), InMemoryProfessors())

    with pytest.raises(ValidationError, match="name, gender and birth date"):
        service.register(_form(gender=" "), now=NOW)
    with pytest.raises(ValidationError, match="at least one office"):
        service.register(_form(office_ids=[]), now=NOW)
    assert visitors.created == []


def test_register_rejection_becomes_validation_error():
    visitors = InMemoryVisitors(create_error=HttpStatusError("Duplicate visitor", 409))
    service = RegistrationService(visitors, InMemoryLogs(), InMemoryOffices(), InMemoryProfessors())

    with pytest.raises(ValidationError, match="Failed to register: Duplicate visitor"):
        service.register(_form(), now=NOW)


def test_register_survives_entry_log_failure():
    logs = InMemoryLogs(error=TransportError("down"))
    service = RegistrationService(InMemoryVisitors(), logs, InMemoryOffices(), InMemoryProfessors())

    assert service.register(_form(), now=NOW)


def test_professors_for_offices_degrades_per_office():
    professors = InMemoryProfessors({"5": [Professor(11, "Ben Santos")]}, failing_offices={"7"})
    service = RegistrationService(InMemoryVisitors(), InMemoryLogs(), InMemoryOffices(), professors)

    result = service.professors_for_offices(["5", "7", "5", ""])

    assert list(result) == ["5", "7"]
    assert [p.name for p in result["5"]] == ["Ben Santos"]
    assert result["7"] == []


def _pass_service(visitor, rows=(), visits_error=None):
    return VisitorPassService(
        InMemoryVisitors({visitor.visitors_id: visitor} if visitor else {}),
        InMemoryVisits(list(rows), error=visits_error),
        InMemoryOffices([Office(5, "Registrar")]),
        InMemoryProfessors({"5": [Professor(11, "Ben Santos")]}),
    )


VISITOR = Visitor(
    "V1",
    "Ana Reyes",
    faculty_to_visit=(PlannedVisit("Registrar", "Ben Santos"), PlannedVisit("Library")),
)


def test_pass_lines_come_from_office_visits():
    rows = [
        OfficeVisit(1, "V1", 5, 11, "Enrollment", "2025-01-05T01:00:00Z"),
        OfficeVisit(2, "V1", 9, None, None, "2025-01-05T01:00:00Z", professor_name="Dr. Cruz"),
    ]

    visitor_pass = _pass_service(VISITOR, rows).pass_for("V1")

    assert [(line.office, line.professor, line.purpose) for line in visitor_pass.lines] == [
        ("Registrar", "Ben Santos", "Enrollment"),
        ("9", "Dr. Cruz", ""),
    ]


def test_pass_falls_back_to_registration_choices():
    visitor_pass = _pass_service(VISITOR, visits_error=TransportError("down")).pass_for("V1")

    assert [(line.office, line.professor) for line in visitor_pass.lines] == [
        ("Registrar", "Ben Santos"),
        ("Library", ""),
    ]


def test_pass_errors():
    with pytest.raises(ValidationError, match="No visitor ID"):
        _pass_service(VISITOR).pass_for(None)
    with pytest.raises(ValidationError, match="Visitor not found"):
        _pass_service(None).pass_for("V404")


def test_stats_count_today_and_month():
    visitors = InMemoryVisitors(created_on={date(2025, 1, 5): 2, date(2025, 1, 2): 3, date(2024, 12, 31): 4})

    stats = VisitorStatsService(visitors).counts(now=NOW)

    assert (stats.today, stats.month) == (2, 5)


def test_stats_unavailable_on_backend_failure():
    stats = VisitorStatsService(InMemoryVisitors(list_error=TransportError("down"))).counts(now=NOW)

    assert (stats.today, stats.month) == (None, None)


class FailingOffices:
    def list_all(self):
        raise TransportError("down")


def test_pass_keeps_visit_lines_when_office_lookup_fails():
    rows = [OfficeVisit(1, "V1", 5, 11, "Enrollment", "2025-01-05T01:00:00Z")]
    service = VisitorPassService(
        InMemoryVisitors({"V1": VISITOR}),
        InMemoryVisits(rows),
        FailingOffices(),
        InMemoryProfessors({"5": [Professor(11, "Ben Santos")]}),
    )

    visitor_pass = service.pass_for("V1")

    assert [(line.office, line.professor, line.purpose) for line in visitor_pass.lines] == [
        ("5", "Ben Santos", "Enrollment"),
    ]
