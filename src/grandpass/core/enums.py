from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Optional


class Role(IntEnum):
    """Numeric account roles issued by the backend."""

    ADMIN = 1
    PROFESSOR = 2
    DEPARTMENT = 3
    GUARD = 4

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return cls(int(str(value).strip()))
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.name.title()


class ReportFilter(str, Enum):
    """Date windows offered by the visit tables."""

    TODAY = "today"
    MONTH = "month"
    RANGE = "range"
    ALL = "all"


class ScanStatus(str, Enum):
    TAGGED = "tagged"
    RECORDED = "recorded"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    ERROR = "error"
