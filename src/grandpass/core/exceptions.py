from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid, before any backend call is made."""


class AuthenticationError(DomainError):
    """Raised when login credentials are rejected."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ApiError(Exception):
    """Base exception for failures talking to the backend API."""


class TransportError(ApiError):
    """The request never produced a response (DNS, refused, reset, timeout)."""


class HttpStatusError(ApiError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ApiError):
    """The backend answered 2xx but the body is not the JSON we asked for."""
