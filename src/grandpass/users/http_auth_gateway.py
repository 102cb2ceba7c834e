from __future__ import annotations

from typing import Any, Optional

from ..api.client import BackendClient


class HttpAuthGateway:
    def __init__(self, client: BackendClient):
        self._client = client

    def login(self, *, username: str, password: str) -> Any:
        return self._client.post_json("/api/login", {"username": username, "password": password})

    def logout(self, token: Optional[str]) -> Any:
        return self._client.post_json("/api/logout", {"token": token} if token else {})
