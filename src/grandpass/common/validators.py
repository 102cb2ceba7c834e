from __future__ import annotations

from datetime import date
from typing import Mapping, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_all(fields: Mapping[str, object], message: str = "All fields are required.") -> None:
    for value in fields.values():
        if value is None or not str(value).strip():
            raise ValidationError(message)


def require_date_range(date_from: Optional[str], date_to: Optional[str]) -> tuple[date, date]:
    """Validate a report date range before anything is fetched."""
    if not date_from or not date_to:
        raise ValidationError("Please select both dates.")
    try:
        start = parse_iso_date(date_from)
        end = parse_iso_date(date_to)
    except ValueError:
        raise ValidationError("Dates must use the YYYY-MM-DD format.")
    if start > end:
        raise ValidationError("Please ensure the first date is before the second date")
    return start, end
