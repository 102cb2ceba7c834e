from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ScanStatus
from ..visits.model import RecordId


@dataclass(frozen=True)
class ScanOutcome:
    status: ScanStatus
    message: str
    visit_id: Optional[RecordId] = None
    visitor_name: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (ScanStatus.TAGGED, ScanStatus.RECORDED)

    def to_json(self) -> dict:
        return {
            "success": self.success,
            "status": self.status.value,
            "message": self.message,
            "visit_id": self.visit_id,
            "visitor_name": self.visitor_name,
        }
