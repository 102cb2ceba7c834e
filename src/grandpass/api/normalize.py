"""Adapters from loosely-shaped backend JSON to the canonical records.

The backend is not fully under our control and names the same concept in
several ways (``dept_id`` / ``deptId`` / ``department`` ...). Every alternate
spelling is mapped here, at the boundary, so the rest of the app only sees
the dataclasses in the feature ``model`` modules.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping, Optional

from ..core.constants import (
    DEPARTMENT_KEYS,
    FIRST_NAME_KEYS,
    FULL_NAME_KEYS,
    LAST_NAME_KEYS,
    MIDDLE_NAME_KEYS,
    PROFESSOR_ID_KEYS,
    VISITOR_ID_KEYS,
)
from ..core.enums import Role
from ..directory.model import Office, Professor, Service
from ..users.model import SessionUser
from ..visitors.model import PlannedVisit, Visitor
from ..visits.model import OfficeVisit, VisitorLog

_SPACES = re.compile(r"\s{2,}")


def first_present(record: Optional[Mapping[str, Any]], keys: Iterable[str]) -> Any:
    """First value under ``keys`` that is neither None nor blank."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def as_list(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        return [payload]
    return []


def as_tagged(value: Any) -> bool:
    """Strict tag flag: only true / 1 count as tagged."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true"}
    return False


def same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return str(left).strip() == str(right).strip()


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def format_full_name(person: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Display name of a visitor or professor record, None when it has none."""
    if not isinstance(person, Mapping) or not person:
        return None

    full = first_present(person, FULL_NAME_KEYS)
    if full is not None:
        return _SPACES.sub(" ", str(full).strip())

    parts = [
        _text(first_present(person, FIRST_NAME_KEYS)),
        _text(first_present(person, MIDDLE_NAME_KEYS)),
        _text(first_present(person, LAST_NAME_KEYS)),
    ]
    joined = " ".join(p for p in parts if p)
    return _SPACES.sub(" ", joined) or None


def department_of(row: Optional[Mapping[str, Any]]) -> Any:
    return first_present(row, DEPARTMENT_KEYS)


def office_name(record: Optional[Mapping[str, Any]]) -> Optional[str]:
    name = first_present(record, ("department", "name"))
    return str(name).strip() if name is not None else None


def office_from_json(data: Mapping[str, Any]) -> Office:
    return Office(id=data.get("id"), name=office_name(data) or "")


def professor_from_json(data: Mapping[str, Any]) -> Professor:
    return Professor(
        id=data.get("id"),
        name=format_full_name(data),
        first_name=_text(first_present(data, FIRST_NAME_KEYS)),
        middle_name=_text(first_present(data, MIDDLE_NAME_KEYS)),
        last_name=_text(first_present(data, LAST_NAME_KEYS)),
        email=_text(data.get("email")),
        phone=_text(data.get("phone")),
        position=_text(data.get("position")),
        birth_date=_text(data.get("birth_date")),
        department=first_present(data, ("department", "dept_id", "department_id")),
        created_at=_text(first_present(data, ("createdAt", "created_at"))),
    )


def _planned_visits(value: Any) -> tuple[PlannedVisit, ...]:
    if isinstance(value, str):
        # Older rows store the list as a JSON string.
        try:
            value = json.loads(value)
        except ValueError:
            value = [value] if value.strip() else []
    out = []
    for item in as_list(value):
        if isinstance(item, Mapping):
            out.append(PlannedVisit(office=str(item.get("office") or ""), professor=_text(item.get("professor"))))
        elif item:
            out.append(PlannedVisit(office=str(item)))
    return tuple(out)


def visitor_from_json(data: Mapping[str, Any]) -> Visitor:
    return Visitor(
        visitors_id=str(first_present(data, VISITOR_ID_KEYS) or ""),
        name=format_full_name(data),
        first_name=_text(first_present(data, FIRST_NAME_KEYS)),
        middle_name=_text(first_present(data, MIDDLE_NAME_KEYS)),
        last_name=_text(first_present(data, LAST_NAME_KEYS)),
        email=_text(data.get("email")),
        phone=_text(data.get("phone")),
        gender=_text(data.get("gender")),
        birth_date=_text(data.get("birth_date")),
        purpose=_text(first_present(data, ("purpose_of_visit", "purpose"))),
        created_at=_text(first_present(data, ("createdAt", "created_at"))),
        faculty_to_visit=_planned_visits(data.get("faculty_to_visit")),
    )


def office_visit_from_json(data: Mapping[str, Any]) -> OfficeVisit:
    raw_tag = data.get("qr_tagged")
    return OfficeVisit(
        id=first_present(data, ("id", "logid")),
        visitors_id=str(first_present(data, VISITOR_ID_KEYS) or ""),
        dept_id=department_of(data),
        prof_id=first_present(data, PROFESSOR_ID_KEYS),
        purpose=_text(data.get("purpose")),
        created_at=_text(first_present(data, ("createdAt", "created_at"))),
        qr_tagged=None if raw_tag is None else as_tagged(raw_tag),
        professor_name=_text(data.get("professor_name")),
    )


def visitor_log_from_json(data: Mapping[str, Any]) -> VisitorLog:
    return VisitorLog(
        visitors_id=str(first_present(data, VISITOR_ID_KEYS) or ""),
        created_at=_text(first_present(data, ("createdAt", "created_at"))),
        time_in=_text(first_present(data, ("timeIn", "time_in"))),
        time_out=_text(first_present(data, ("timeOut", "time_out"))),
    )


def service_from_json(data: Mapping[str, Any]) -> Service:
    return Service(
        id=data.get("id"),
        name=str(first_present(data, ("srvc_name", "name")) or ""),
        description=_text(data.get("description")),
        dept_id=first_present(data, ("dept_id", "department_id")),
        created_at=_text(first_present(data, ("createdAt", "created_at"))),
    )


def session_user_from_json(payload: Mapping[str, Any]) -> SessionUser:
    """Build the session from a /api/login response (``{user: {...}}`` or flat)."""
    user = payload.get("user") if isinstance(payload.get("user"), Mapping) else payload
    token = first_present(user, ("adminToken", "token")) or first_present(payload, ("token",))
    return SessionUser(
        username=str(first_present(user, ("username",)) or ""),
        role=Role.parse(user.get("role")),
        token=token,
        user_id=first_present(user, ("user_id", "id")),
        dept_id=first_present(user, ("dept_id", "deptId", "department_id")),
        prof_id=first_present(user, PROFESSOR_ID_KEYS),
    )


def created_id(payload: Any) -> Any:
    """Id of a freshly created record, wherever the backend put it."""
    if not isinstance(payload, Mapping):
        return None
    found = first_present(payload, ("id", "insertId", "prof_id", "professor_id"))
    if found is None and isinstance(payload.get("created"), Mapping):
        found = payload["created"].get("id")
    return found
