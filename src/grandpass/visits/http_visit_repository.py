from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Sequence

from ..api.client import BackendClient, segment
from ..api.normalize import as_list, office_visit_from_json, same_id, visitor_log_from_json
from ..core.exceptions import HttpStatusError
from ..core.logger import get_logger
from .model import OfficeVisit, RecordId, VisitorLog

logger = get_logger(__name__)


class HttpOfficeVisitRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def _fetch(self, params: Optional[dict] = None) -> list[OfficeVisit]:
        payload = self._client.get_json("/api/office_visits", params=params)
        return [office_visit_from_json(r) for r in as_list(payload) if isinstance(r, Mapping)]

    def list_all(self) -> Sequence[OfficeVisit]:
        return self._fetch()

    def list_for_visitor(self, visitors_id: str) -> Sequence[OfficeVisit]:
        try:
            rows = self._fetch({"visitorsID": visitors_id})
        except HttpStatusError as e:
            logger.warning("Filtered office_visits query failed (%s), filtering all rows", e.status_code)
            rows = self._fetch()
        # Older backends ignore the query string and return every row.
        return [r for r in rows if same_id(r.visitors_id, visitors_id)]

    def list_for_professor(self, prof_id: RecordId) -> Sequence[OfficeVisit]:
        rows = self._fetch({"prof_id": prof_id})
        if rows and not all(same_id(r.prof_id, prof_id) for r in rows):
            rows = [r for r in rows if same_id(r.prof_id, prof_id)]
        return rows

    def mark_tagged(self, *, visitors_id: str, dept_id: Optional[RecordId]) -> Any:
        return self._client.put_json(
            f"/api/office_visits/by-visitors/{segment(visitors_id)}",
            {"dept_id": dept_id, "qr_tagged": 1},
        )

    def mark_tagged_by_id(self, visit_id: RecordId) -> Any:
        return self._client.put_json(f"/api/office_visits/{segment(visit_id)}", {"qr_tagged": 1})


class HttpVisitorLogRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def list_all(self) -> Sequence[VisitorLog]:
        payload = self._client.get_json("/api/visitorslog")
        return [visitor_log_from_json(r) for r in as_list(payload) if isinstance(r, Mapping)]

    def create(self, visitors_id: str) -> Any:
        return self._client.post_json("/api/visitorslog", {"visitorsID": visitors_id})

    def record_scan(self, *, visitors_id: str, dept_id: Optional[RecordId]) -> Optional[str]:
        payload: dict = {"visitorsID": visitors_id}
        if dept_id:
            payload["dept_id"] = dept_id
        data = self._client.post_json("/api/visitorslog/scan", payload)
        if isinstance(data, Mapping) and data.get("message"):
            return str(data["message"])
        return None
