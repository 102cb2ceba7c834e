from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Optional, Sequence

from ..api.client import BackendClient, segment
from ..api.normalize import as_list, visitor_from_json
from ..core.exceptions import HttpStatusError
from .model import Visitor


class HttpVisitorRepository:
    def __init__(self, client: BackendClient):
        self._client = client

    def get(self, visitors_id: str) -> Optional[Visitor]:
        try:
            data = self._client.get_json(f"/api/visitorsdata/{segment(visitors_id)}")
        except HttpStatusError as e:
            if e.status_code == 404:
                return None
            raise

        # Some deployments wrap the record in a one-element list.
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, Mapping):
            return None

        visitor = visitor_from_json(data)
        if not visitor.visitors_id:
            visitor = visitor_from_json({**data, "visitorsID": visitors_id})
        return visitor

    def create(self, payload: dict) -> Any:
        return self._client.post_json("/api/visitorsdata", payload)

    def _list(self, params: dict) -> list[Visitor]:
        payload = self._client.get_json("/api/visitors", params=params)
        return [visitor_from_json(r) for r in as_list(payload) if isinstance(r, Mapping)]

    def list_created_on(self, day: date) -> Sequence[Visitor]:
        return self._list({"createdAt": day.isoformat()})

    def list_created_between(self, start: date, end: date) -> Sequence[Visitor]:
        return self._list({"startDate": start.isoformat(), "endDate": end.isoformat()})
