from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Iterable, Optional, Union

from ..api.normalize import session_user_from_json
from ..common.validators import require_all
from ..core.enums import Role
from ..core.exceptions import ApiError, AuthenticationError, AuthorizationError, HttpStatusError
from ..core.logger import get_logger
from .model import SessionUser
from .repository import AuthGateway

logger = get_logger(__name__)


class AuthService:
    """Use case: log into one of the portals through the backend."""

    def __init__(self, gateway: AuthGateway):
        self._gateway = gateway

    def login(
        self,
        username: str,
        password: str,
        *,
        required_role: Union[Role, Iterable[Role], None] = None,
    ) -> SessionUser:
        """Authenticate against the backend.

        ``required_role`` restricts the portal to one role or a set of roles;
        the first one names the portal in the refusal message.
        """
        require_all({"username": username, "password": password}, message="Please enter your username and password.")

        try:
            payload = self._gateway.login(username=username.strip(), password=password)
        except HttpStatusError as e:
            raise AuthenticationError(str(e) or "Login failed")
        except ApiError as e:
            logger.error("Login request failed: %s", e)
            raise AuthenticationError(str(e) or "Login failed")

        if not isinstance(payload, Mapping):
            raise AuthenticationError("Login failed")

        user = session_user_from_json(payload)
        if not user.username:
            user = replace(user, username=username.strip())

        roles = (required_role,) if isinstance(required_role, Role) else tuple(required_role or ())
        if roles and user.role not in roles:
            logger.warning("User %s refused at the %s login (role=%s)", user.username, roles[0].label, user.role)
            raise AuthorizationError(f"Access denied: not a {roles[0].label.lower()} account")

        logger.info("User %s logged in (role=%s)", user.username, user.role)
        return user

    def logout(self, token: Optional[str]) -> None:
        try:
            self._gateway.logout(token)
        except ApiError as e:
            logger.warning("Backend logout failed: %s", e)
