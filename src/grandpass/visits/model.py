from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

RecordId = Union[int, str]


@dataclass(frozen=True)
class OfficeVisit:
    """One office a visitor intends to visit on one occasion.

    ``qr_tagged`` keeps the backend tri-state: None (never set), False, True.
    """

    id: Optional[RecordId]
    visitors_id: str
    dept_id: Optional[RecordId]
    prof_id: Optional[RecordId]
    purpose: Optional[str]
    created_at: Optional[str]
    qr_tagged: Optional[bool] = None
    professor_name: Optional[str] = None

    @property
    def is_tagged(self) -> bool:
        return bool(self.qr_tagged)


@dataclass(frozen=True)
class VisitorLog:
    """One physical entry scan."""

    visitors_id: str
    created_at: Optional[str]
    time_in: Optional[str] = None
    time_out: Optional[str] = None


@dataclass(frozen=True)
class OfficeVisitDetail:
    dept_id: Optional[RecordId]
    office: str
    prof_id: Optional[RecordId]
    professor: str
    purpose: Optional[str]
    created_at: Optional[str]
    qr_tagged: bool


@dataclass
class GroupedVisit:
    """All office visits of one visitor on one Manila day. Never persisted."""

    visitors_id: str
    date: str
    visitor: str
    offices: list[OfficeVisitDetail] = field(default_factory=list)
    time_in_iso: Optional[str] = None
    time_out_iso: Optional[str] = None
    tagged: bool = False


@dataclass(frozen=True)
class DepartmentVisitRow:
    """Read-model for the department report table and its exports."""

    id: Optional[RecordId]
    visitors_id: str
    visitor_name: str
    professor: str
    purpose: str
    created_at: Optional[str]
    date_time: str
    tagged: bool

    @property
    def status(self) -> str:
        return "Tagged" if self.tagged else "Pending"
