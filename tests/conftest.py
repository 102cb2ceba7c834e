from __future__ import annotations

import json
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import pytest

from grandpass.api.client import BackendClient

BASE_URL = "http://backend.test"


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, text: Optional[str] = None):
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif body is None:
            self.text = ""
        else:
            self.text = json.dumps(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Stands in for ``requests.Session``; routes by (METHOD, path)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[dict] = []

    def on(self, method: str, path: str, response: Any) -> "FakeSession":
        self.routes[(method.upper(), path)] = response
        return self

    def calls_to(self, method: str, path: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method.upper() and c["path"] == path]

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        path = urlsplit(url).path
        body = json.loads(data) if data else None
        call = {"method": method.upper(), "path": path, "params": params, "json": body, "headers": headers}
        self.calls.append(call)

        handler = self.routes.get((method.upper(), path))
        if handler is None:
            return FakeResponse(404, {"message": f"No route for {method} {path}"})
        if isinstance(handler, Exception):
            raise handler
        if callable(handler) and not isinstance(handler, FakeResponse):
            handler = handler(call)
        if isinstance(handler, FakeResponse):
            return handler
        return FakeResponse(200, handler)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def backend(fake_session) -> BackendClient:
    return BackendClient(BASE_URL, session=fake_session)


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    return FakeResponse
