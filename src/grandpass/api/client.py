from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import quote

import requests

from ..core.exceptions import HttpStatusError, MalformedResponseError, TransportError
from ..core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "ngrok-skip-browser-warning": "true",
}


def segment(value: Any) -> str:
    """Escape one path segment (visitor ids come straight from QR codes)."""
    return quote(str(value), safe="")


def looks_like_html(text: str) -> bool:
    head = text.lstrip()[:15].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


def _error_message(text: str, status_code: int) -> str:
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    if text.strip() and not looks_like_html(text):
        return text.strip()
    return f"Request failed ({status_code})"


def decode_response(response: requests.Response) -> Any:
    """Turn a backend response into JSON data or raise an ApiError.

    HTML bodies (tunnel error pages, misrouted requests) are failures even
    with status 200 and are never handed to the JSON parser.
    """
    text = response.text or ""

    if looks_like_html(text):
        raise MalformedResponseError(
            "Received HTML instead of JSON. The backend may be down or the URL is incorrect."
        )

    if not response.ok:
        raise HttpStatusError(_error_message(text, response.status_code), response.status_code, body=text)

    if not text.strip():
        return None

    try:
        return json.loads(text)
    except ValueError:
        raise MalformedResponseError(f"Response is not valid JSON: {text[:200]}")


class BackendClient:
    """Thin JSON client for the visitor backend REST API."""

    def __init__(self, base_url: str, *, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, *, params: Optional[dict] = None, payload: Any = None) -> Any:
        url = self._url(path)
        headers = dict(DEFAULT_HEADERS)
        if payload is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=json.dumps(payload) if payload is not None else None,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Could not reach the server: {e}")

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return decode_response(response)

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post_json(self, path: str, payload: Any) -> Any:
        return self.request("POST", path, payload=payload)

    def put_json(self, path: str, payload: Any) -> Any:
        return self.request("PUT", path, payload=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
