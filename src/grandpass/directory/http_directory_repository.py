from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Sequence

from ..api.client import BackendClient, segment
from ..api.normalize import as_list, office_from_json, professor_from_json, same_id, service_from_json
from ..visits.model import RecordId
from .model import Office, Professor, Service


def _records(payload: Any) -> list[Mapping]:
    return [r for r in as_list(payload) if isinstance(r, Mapping)]


class HttpOfficeRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def list_all(self) -> Sequence[Office]:
        return [office_from_json(r) for r in _records(self._client.get_json("/api/offices"))]

    def list_departments(self) -> Sequence[Office]:
        return [office_from_json(r) for r in _records(self._client.get_json("/api/departments"))]

    def create(self, *, name: str) -> Any:
        return self._client.post_json("/api/offices", {"department": name})

    def rename(self, *, office_id: RecordId, name: str) -> Any:
        return self._client.put_json(f"/api/offices/{segment(office_id)}", {"department": name})

    def delete(self, office_id: RecordId) -> Any:
        return self._client.delete(f"/api/offices/{segment(office_id)}")


class HttpProfessorRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def list_all(self) -> Sequence[Professor]:
        return [professor_from_json(r) for r in _records(self._client.get_json("/api/professors"))]

    def list_by_department(self, dept_id: RecordId) -> Sequence[Professor]:
        payload = self._client.get_json(f"/api/professors/department/{segment(dept_id)}")
        profs = [professor_from_json(r) for r in _records(payload)]
        return [p for p in profs if p.department is None or same_id(p.department, dept_id)]

    def create(self, payload: dict) -> Any:
        return self._client.post_json("/api/professors", payload)

    def update(self, *, prof_id: RecordId, payload: dict) -> Any:
        return self._client.put_json(f"/api/professors/{segment(prof_id)}", payload)

    def get_profile(self, prof_id: RecordId) -> dict:
        data = self._client.get_json(f"/api/professor-users/{segment(prof_id)}")
        return dict(data) if isinstance(data, Mapping) else {}

    def update_profile(self, *, prof_id: RecordId, payload: dict) -> Any:
        return self._client.put_json(f"/api/professor-users/by-professor/{segment(prof_id)}", payload)


class HttpServiceRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def list_all(self) -> Sequence[Service]:
        return [service_from_json(r) for r in _records(self._client.get_json("/api/services"))]

    @staticmethod
    def _payload(name: str, dept_id: RecordId, description: Optional[str]) -> dict:
        payload: dict = {"srvc_name": name, "dept_id": dept_id}
        if description:
            payload["description"] = description
        return payload

    def create(self, *, name: str, dept_id: RecordId, description: Optional[str]) -> Any:
        return self._client.post_json("/api/services", self._payload(name, dept_id, description))

    def update(self, *, service_id: RecordId, name: str, dept_id: RecordId, description: Optional[str]) -> Any:
        return self._client.put_json(f"/api/services/{segment(service_id)}", self._payload(name, dept_id, description))

    def delete(self, service_id: RecordId) -> Any:
        return self._client.delete(f"/api/services/{segment(service_id)}")


class HttpUserAccountRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def create(self, payload: dict) -> Any:
        return self._client.post_json("/api/users", payload)
