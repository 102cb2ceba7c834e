from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..visits.model import RecordId


@dataclass(frozen=True)
class Office:
    """Office / department a visitor may visit."""

    id: Optional[RecordId]
    name: str


@dataclass(frozen=True)
class Professor:
    id: Optional[RecordId]
    name: Optional[str]
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    birth_date: Optional[str] = None
    department: Optional[RecordId] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Service:
    id: Optional[RecordId]
    name: str
    description: Optional[str] = None
    dept_id: Optional[RecordId] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class CreatedProfessor:
    """Outcome of creating a professor plus its login account."""

    professor_id: Optional[RecordId]
    username: str
    temp_password: Optional[str]
    account_error: Optional[str] = None
