from __future__ import annotations

from typing import Optional

from ..api.normalize import same_id
from ..core.enums import ScanStatus
from ..core.exceptions import ApiError, HttpStatusError, ValidationError
from ..core.logger import get_logger
from ..visitors.repository import VisitorRepository
from ..visits.model import OfficeVisit, RecordId
from ..visits.repository import OfficeVisitRepository, VisitorLogRepository
from .lock import ScanLock
from .model import ScanOutcome

logger = get_logger(__name__)

TAGGED_MESSAGE = "Visitor verified and QR tagged"
NOT_FOUND_MESSAGE = "No appointment found for this visitor"
FAILED_MESSAGE = "Failed to process scan."
BUSY_MESSAGE = "A scan is already being processed. Please wait."
ENTRY_MESSAGE = "Visitor entry recorded"


def _has_dept(dept_id: Optional[RecordId]) -> bool:
    return dept_id is not None and str(dept_id).strip() != ""


def pick_candidate(rows: list[OfficeVisit], dept_id: Optional[RecordId]) -> Optional[OfficeVisit]:
    """First untagged row for the department, else the first row, else None.

    Backend order is kept among equals (``sorted`` is stable).
    """
    if _has_dept(dept_id):
        rows = [r for r in rows if same_id(r.dept_id, dept_id)]
    if not rows:
        return None
    return sorted(rows, key=lambda r: r.is_tagged)[0]


class QrTagService:
    def __init__(
        self,
        visits: OfficeVisitRepository,
        logs: Optional[VisitorLogRepository] = None,
        visitors: Optional[VisitorRepository] = None,
        *,
        lock: Optional[ScanLock] = None,
    ):
        self._visits = visits
        self._logs = logs
        self._visitors = visitors
        self._lock = lock

    def _visitor_name(self, visitors_id: str) -> Optional[str]:
        if self._visitors is None:
            return None
        try:
            visitor = self._visitors.get(visitors_id)
        except ApiError as e:
            logger.warning("Could not load visitor %s: %s", visitors_id, e)
            return None
        return visitor.name if visitor else None

    def reconcile(self, visitors_id: str, dept_id: Optional[RecordId] = None) -> ScanOutcome:
        """Tag the matching office visit for a scanned visitor id."""
        visitors_id = (visitors_id or "").strip()
        if not visitors_id:
            raise ValidationError("QR code is empty")

        try:
            rows = list(self._visits.list_for_visitor(visitors_id))
            candidate = pick_candidate(rows, dept_id)
            if candidate is None:
                message = NOT_FOUND_MESSAGE + (" in this department" if _has_dept(dept_id) else "")
                logger.info("Scan %s: %s", visitors_id, message)
                return ScanOutcome(ScanStatus.NOT_FOUND, message)

            target_dept = dept_id if _has_dept(dept_id) else candidate.dept_id
            try:
                self._visits.mark_tagged(visitors_id=visitors_id, dept_id=target_dept)
            except HttpStatusError as e:
                if candidate.id is None:
                    raise
                logger.warning("Tag by visitor failed (%s), tagging visit %s directly", e.status_code, candidate.id)
                self._visits.mark_tagged_by_id(candidate.id)
        except ApiError as e:
            logger.error("Scan %s failed: %s", visitors_id, e)
            return ScanOutcome(ScanStatus.ERROR, FAILED_MESSAGE)

        logger.info("Scan %s: visit %s tagged", visitors_id, candidate.id)
        return ScanOutcome(
            ScanStatus.TAGGED,
            TAGGED_MESSAGE,
            visit_id=candidate.id,
            visitor_name=self._visitor_name(visitors_id),
        )

    def record_entry(self, visitors_id: str, dept_id: Optional[RecordId] = None) -> ScanOutcome:
        """Register a physical entry scan at the gate or an office."""
        visitors_id = (visitors_id or "").strip()
        if not visitors_id:
            raise ValidationError("QR code is empty")
        if self._logs is None:
            raise ValidationError("Entry logging is not available")

        try:
            message = self._logs.record_scan(visitors_id=visitors_id, dept_id=dept_id if _has_dept(dept_id) else None)
        except HttpStatusError as e:
            logger.warning("Entry scan %s rejected: %s", visitors_id, e)
            return ScanOutcome(ScanStatus.ERROR, str(e) or "Scan failed")
        except ApiError as e:
            logger.error("Entry scan %s failed: %s", visitors_id, e)
            return ScanOutcome(ScanStatus.ERROR, FAILED_MESSAGE)

        logger.info("Entry scan %s recorded", visitors_id)
        return ScanOutcome(
            ScanStatus.RECORDED,
            message or ENTRY_MESSAGE,
            visitor_name=self._visitor_name(visitors_id),
        )

    def scan(
        self,
        station_key: str,
        code: str,
        *,
        dept_id: Optional[RecordId] = None,
        department_mode: bool = False,
    ) -> ScanOutcome:
        """Process one decoded QR code from a scanner station.

        Guard stations record the entry. Department stations record the entry
        and then tag the department's office visit. Overlapping scans from
        the same station get a ``busy`` outcome.
        """
        token = None
        if self._lock is not None:
            token = self._lock.acquire(station_key)
            if token is None:
                return ScanOutcome(ScanStatus.BUSY, BUSY_MESSAGE)
        try:
            if not department_mode:
                return self.record_entry(code, dept_id)

            entry = self.record_entry(code, dept_id)
            if entry.status == ScanStatus.ERROR:
                return entry
            return self.reconcile(code, dept_id)
        finally:
            if token is not None:
                self._lock.release(station_key, token)
