from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..visits.model import RecordId


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    username: str
    role: Optional[Role]
    token: Optional[str] = None
    user_id: Optional[RecordId] = None
    dept_id: Optional[RecordId] = None
    prof_id: Optional[RecordId] = None

    def to_session(self) -> dict:
        data = asdict(self)
        data["role"] = int(self.role) if self.role is not None else None
        return data

    @classmethod
    def from_session(cls, data: Mapping[str, Any]) -> "SessionUser":
        return cls(
            username=str(data.get("username") or ""),
            role=Role.parse(data.get("role")),
            token=data.get("token"),
            user_id=data.get("user_id"),
            dept_id=data.get("dept_id"),
            prof_id=data.get("prof_id"),
        )

    def has_role(self, *roles: Role) -> bool:
        return not roles or self.role in roles
