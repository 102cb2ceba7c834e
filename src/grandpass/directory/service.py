from __future__ import annotations

import secrets
import string
from typing import Any, Mapping, Optional, Sequence

from ..api.normalize import created_id
from ..common.validators import require_all, require_non_empty
from ..core.constants import TEMP_PASSWORD_LENGTH
from ..core.exceptions import ApiError, HttpStatusError, ValidationError
from ..core.logger import get_logger
from ..visits.model import RecordId
from .model import CreatedProfessor, Office, Professor, Service
from .repository import OfficeRepository, ProfessorRepository, ServiceRepository, UserAccountRepository

logger = get_logger(__name__)

PROFESSOR_FIELDS = (
    "first_name",
    "middle_name",
    "last_name",
    "birth_date",
    "phone",
    "email",
    "position",
    "department",
)

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def professor_username(first_name: str, last_name: str) -> str:
    return "".join(f"{first_name}.{last_name}".lower().split())


def temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class OfficeService:
    def __init__(self, offices: OfficeRepository):
        self._offices = offices

    def list_offices(self) -> Sequence[Office]:
        return self._offices.list_all()

    def list_departments(self) -> Sequence[Office]:
        return self._offices.list_departments()

    def create(self, name: Optional[str]) -> None:
        name = require_non_empty(name, "Office name")
        self._offices.create(name=name)
        logger.info("Office created: %s", name)

    def rename(self, office_id: RecordId, name: Optional[str]) -> None:
        name = require_non_empty(name, "Office name")
        self._offices.rename(office_id=office_id, name=name)
        logger.info("Office %s renamed to %s", office_id, name)

    def delete(self, office_id: RecordId) -> None:
        self._offices.delete(office_id)
        logger.info("Office %s deleted", office_id)


class ProfessorService:
    def __init__(self, professors: ProfessorRepository, accounts: UserAccountRepository):
        self._professors = professors
        self._accounts = accounts

    def list_professors(self, dept_id: Optional[RecordId] = None) -> Sequence[Professor]:
        if dept_id is None or str(dept_id).strip() == "":
            return self._professors.list_all()
        return self._professors.list_by_department(dept_id)

    def department_professors(self, dept_id: Optional[RecordId]) -> Sequence[Professor]:
        """Professors of a signed-in department account."""
        if dept_id is None or str(dept_id).strip() == "":
            raise ValidationError("No department is linked to this account.")
        return self._professors.list_by_department(dept_id)

    @staticmethod
    def _clean(form: Mapping[str, Any]) -> dict:
        data = {key: str(form.get(key) or "").strip() for key in PROFESSOR_FIELDS}
        require_all(data, message="All fields are required.")
        department = _as_int(data["department"])
        if department is None:
            raise ValidationError("Please choose a valid department.")
        data["department"] = department
        return data

    def create(self, form: Mapping[str, Any]) -> CreatedProfessor:
        """Save a professor, then its login account.

        The professor is never rolled back when the account cannot be created;
        the failure is reported in ``account_error`` instead.
        """
        data = self._clean(form)
        response = self._professors.create(data)
        prof_id = created_id(response)
        logger.info("Professor created: %s %s (id=%s)", data["first_name"], data["last_name"], prof_id)

        username = professor_username(data["first_name"], data["last_name"])
        password = temp_password()
        account = {
            "username": username,
            "email": data["email"],
            "phone": data["phone"],
            "password": password,
            "dept_id": data["department"] or None,
            "prof_id": prof_id,
        }
        try:
            self._accounts.create(account)
        except ApiError as e:
            logger.warning("Account for professor %s not created: %s", prof_id, e)
            return CreatedProfessor(professor_id=prof_id, username=username, temp_password=None, account_error=str(e))

        return CreatedProfessor(professor_id=prof_id, username=username, temp_password=password)

    def update(self, prof_id: RecordId, form: Mapping[str, Any]) -> None:
        data = self._clean(form)
        self._professors.update(prof_id=prof_id, payload=data)
        logger.info("Professor %s updated", prof_id)


class ProfileService:
    """Faculty self-service profile (account email/phone, professor email)."""

    def __init__(self, professors: ProfessorRepository):
        self._professors = professors

    def load(self, prof_id: Optional[RecordId]) -> dict:
        if prof_id is None or str(prof_id).strip() == "":
            raise ValidationError("No professor is linked to this account.")
        return self._professors.get_profile(prof_id)

    def save(self, prof_id: Optional[RecordId], form: Mapping[str, Any]) -> None:
        if prof_id is None or str(prof_id).strip() == "":
            raise ValidationError("No professor is linked to this account.")

        user = {k: form[k] for k in ("email", "phone", "status") if form.get(k) is not None}
        professor = {"email": form["prof_email"]} if form.get("prof_email") is not None else {}

        body: dict = {}
        if user:
            body["user"] = user
        if professor:
            body["professor"] = professor
        if not body:
            raise ValidationError("Nothing to update.")

        try:
            self._professors.update_profile(prof_id=prof_id, payload=body)
        except HttpStatusError as e:
            raise ValidationError(str(e) or "Failed to save profile")
        logger.info("Profile of professor %s updated", prof_id)


class CatalogService:
    """Services offered by each office."""

    def __init__(self, services: ServiceRepository):
        self._services = services

    def list_services(self) -> Sequence[Service]:
        return self._services.list_all()

    @staticmethod
    def _clean(name: Optional[str], dept_id: Any, description: Optional[str]) -> tuple[str, int, Optional[str]]:
        name = require_non_empty(name, "Service name")
        dept = _as_int(dept_id)
        if dept is None:
            raise ValidationError("Please choose an office for this service.")
        return name, dept, (description or "").strip() or None

    def create(self, name: Optional[str], dept_id: Any, description: Optional[str] = None) -> None:
        name, dept, description = self._clean(name, dept_id, description)
        self._services.create(name=name, dept_id=dept, description=description)
        logger.info("Service created: %s (office %s)", name, dept)

    def update(self, service_id: RecordId, name: Optional[str], dept_id: Any, description: Optional[str] = None) -> None:
        name, dept, description = self._clean(name, dept_id, description)
        self._services.update(service_id=service_id, name=name, dept_id=dept, description=description)
        logger.info("Service %s updated", service_id)

    def delete(self, service_id: RecordId) -> None:
        self._services.delete(service_id)
        logger.info("Service %s deleted", service_id)
