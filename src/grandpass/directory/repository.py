from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..visits.model import RecordId
from .model import Office, Professor, Service


class OfficeRepository(Protocol):
    def list_all(self) -> Sequence[Office]:
        raise NotImplementedError

    def list_departments(self) -> Sequence[Office]:
        raise NotImplementedError

    def create(self, *, name: str) -> Any:
        raise NotImplementedError

    def rename(self, *, office_id: RecordId, name: str) -> Any:
        raise NotImplementedError

    def delete(self, office_id: RecordId) -> Any:
        raise NotImplementedError


class ProfessorRepository(Protocol):
    def list_all(self) -> Sequence[Professor]:
        raise NotImplementedError

    def list_by_department(self, dept_id: RecordId) -> Sequence[Professor]:
        raise NotImplementedError

    def create(self, payload: dict) -> Any:
        """Returns the backend's create response (it carries the new id)."""

        raise NotImplementedError

    def update(self, *, prof_id: RecordId, payload: dict) -> Any:
        raise NotImplementedError

    def get_profile(self, prof_id: RecordId) -> dict:
        raise NotImplementedError

    def update_profile(self, *, prof_id: RecordId, payload: dict) -> Any:
        raise NotImplementedError


class ServiceRepository(Protocol):
    def list_all(self) -> Sequence[Service]:
        raise NotImplementedError

    def create(self, *, name: str, dept_id: RecordId, description: Optional[str]) -> Any:
        raise NotImplementedError

    def update(self, *, service_id: RecordId, name: str, dept_id: RecordId, description: Optional[str]) -> Any:
        raise NotImplementedError

    def delete(self, service_id: RecordId) -> Any:
        raise NotImplementedError


class UserAccountRepository(Protocol):
    def create(self, payload: dict) -> Any:
        raise NotImplementedError
