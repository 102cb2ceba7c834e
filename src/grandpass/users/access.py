"""Session access for the portals.

The logged-in user lives in Flask's signed session cookie under
``SESSION_KEY`` as a plain dict (see ``SessionUser.to_session``).
"""
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, session, url_for

from ..core.enums import Role
from .model import SessionUser

SESSION_KEY = "user"

LOGIN_ENDPOINTS = {
    Role.ADMIN: "admin_login",
    Role.PROFESSOR: "faculty_login",
    Role.DEPARTMENT: "department_login",
    Role.GUARD: "guard_login",
}


def current_user() -> Optional[SessionUser]:
    data = session.get(SESSION_KEY)
    if not isinstance(data, dict):
        return None
    return SessionUser.from_session(data)


def store_user(user: SessionUser, *, permanent: bool = True) -> None:
    session.clear()
    session.permanent = permanent
    session[SESSION_KEY] = user.to_session()


def forget_user() -> None:
    session.pop(SESSION_KEY, None)


def render_forbidden(user: Optional[SessionUser] = None):
    return render_template("403.html", current_user=user), 403


def login_required(*roles: Role):
    """Require a session whose role is one of ``roles`` (any role if empty)."""
    login_endpoint = LOGIN_ENDPOINTS.get(roles[0], "admin_login") if roles else "admin_login"

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                flash("Please log in to continue.", "warning")
                return redirect(url_for(login_endpoint))
            if not user.has_role(*roles):
                return render_forbidden(user)
            return view(*args, **kwargs)

        return wrapper

    return decorator
