from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PlannedVisit:
    """Office / professor pair a visitor picked at registration."""

    office: str
    professor: Optional[str] = None


@dataclass(frozen=True)
class Visitor:
    visitors_id: str
    name: Optional[str]
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[str] = None
    purpose: Optional[str] = None
    created_at: Optional[str] = None
    faculty_to_visit: tuple[PlannedVisit, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        return self.name or self.visitors_id


@dataclass(frozen=True)
class PassLine:
    office: str
    professor: str
    purpose: str


@dataclass(frozen=True)
class VisitorPass:
    visitor: Visitor
    lines: list[PassLine]


@dataclass(frozen=True)
class RegistrationForm:
    first_name: str
    middle_name: str
    last_name: str
    gender: str
    birth_date: str
    email: str
    phone: str
    purpose: str
    office_ids: list[str]
    # office id -> professor id chosen for that office
    professor_by_office: dict[str, str] = field(default_factory=dict)
    offices: dict[str, str] = field(default_factory=dict)
    professor_names: dict[str, str] = field(default_factory=dict)

    def office_name(self, office_id: str) -> str:
        return self.offices.get(str(office_id), str(office_id))

    def professor_name(self, office_id: str) -> Optional[str]:
        prof_id = self.professor_by_office.get(str(office_id))
        if not prof_id:
            return None
        return self.professor_names.get(str(prof_id))
