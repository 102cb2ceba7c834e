from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import OfficeVisit, RecordId, VisitorLog


class OfficeVisitRepository(Protocol):
    def list_all(self) -> Sequence[OfficeVisit]:
        raise NotImplementedError

    def list_for_visitor(self, visitors_id: str) -> Sequence[OfficeVisit]:
        raise NotImplementedError

    def list_for_professor(self, prof_id: RecordId) -> Sequence[OfficeVisit]:
        raise NotImplementedError

    def mark_tagged(self, *, visitors_id: str, dept_id: Optional[RecordId]) -> Any:
        """Tag the visitor's latest visit for ``dept_id``."""

        raise NotImplementedError

    def mark_tagged_by_id(self, visit_id: RecordId) -> Any:
        raise NotImplementedError


class VisitorLogRepository(Protocol):
    def list_all(self) -> Sequence[VisitorLog]:
        raise NotImplementedError

    def create(self, visitors_id: str) -> Any:
        raise NotImplementedError

    def record_scan(self, *, visitors_id: str, dept_id: Optional[RecordId]) -> Optional[str]:
        """Register a physical entry scan; returns the backend's message."""

        raise NotImplementedError
