from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import Visitor


class VisitorRepository(Protocol):
    def get(self, visitors_id: str) -> Optional[Visitor]:
        raise NotImplementedError

    def create(self, payload: dict) -> Any:
        raise NotImplementedError

    def list_created_on(self, day: date) -> Sequence[Visitor]:
        raise NotImplementedError

    def list_created_between(self, start: date, end: date) -> Sequence[Visitor]:
        raise NotImplementedError
