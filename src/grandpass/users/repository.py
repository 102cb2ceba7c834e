from __future__ import annotations

from typing import Any, Optional, Protocol


class AuthGateway(Protocol):
    def login(self, *, username: str, password: str) -> Any:
        raise NotImplementedError

    def logout(self, token: Optional[str]) -> Any:
        raise NotImplementedError
