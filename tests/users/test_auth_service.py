from __future__ import annotations

import pytest

from grandpass.core.enums import Role
from grandpass.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from grandpass.users.http_auth_gateway import HttpAuthGateway
from grandpass.users.model import SessionUser
from grandpass.users.service import AuthService


@pytest.fixture
def auth(backend):
    return AuthService(HttpAuthGateway(backend))


def test_login_builds_session_user(auth, fake_session):
    fake_session.on(
        "POST",
        "/api/login",
        {"user": {"username": "registrar", "role": "3", "dept_id": 5, "user_id": 8}, "token": "t-1"},
    )

    user = auth.login("registrar", "secret", required_role=Role.DEPARTMENT)

    assert user == SessionUser(username="registrar", role=Role.DEPARTMENT, token="t-1", user_id=8, dept_id=5)
    assert fake_session.calls_to("POST", "/api/login")[0]["json"] == {"username": "registrar", "password": "secret"}


def test_guard_portal_refuses_other_roles(auth, fake_session):
    fake_session.on("POST", "/api/login", {"user": {"username": "admin", "role": 1}})

    with pytest.raises(AuthorizationError, match="Access denied: not a guard account"):
        auth.login("admin", "secret", required_role=Role.GUARD)


def test_any_of_several_roles(auth, fake_session):
    fake_session.on("POST", "/api/login", {"username": "admin", "role": 1})

    user = auth.login("admin", "secret", required_role=[Role.DEPARTMENT, Role.ADMIN])

    assert user.role == Role.ADMIN


def test_missing_username_is_filled_from_form(auth, fake_session):
    fake_session.on("POST", "/api/login", {"user": {"role": 4}})

    assert auth.login(" gate1 ", "pw").username == "gate1"


def test_rejected_credentials(auth, fake_session, make_response):
    fake_session.on("POST", "/api/login", make_response(401, {"message": "Invalid credentials"}))

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.login("x", "y")


def test_blank_credentials_never_reach_backend(auth, fake_session):
    with pytest.raises(ValidationError):
        auth.login("", "y")

    assert fake_session.calls == []


def test_logout_is_best_effort(auth, fake_session):
    # no /api/logout route: the fake answers 404
    auth.logout("t-1")

    assert fake_session.calls_to("POST", "/api/logout")[0]["json"] == {"token": "t-1"}


def test_session_round_trip():
    user = SessionUser(username="ben", role=Role.PROFESSOR, prof_id=42)

    assert SessionUser.from_session(user.to_session()) == user
