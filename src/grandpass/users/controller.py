from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..core.logger import get_logger
from .access import LOGIN_ENDPOINTS, current_user, forget_user, store_user

logger = get_logger(__name__)

PORTALS = {
    Role.ADMIN: {"title": "Sign in as an Admin!", "home": "admin_dashboard"},
    Role.GUARD: {"title": "Guard Login", "home": "guard_scanner"},
    Role.DEPARTMENT: {"title": "Department Login", "home": "department_reports"},
    Role.PROFESSOR: {"title": "Faculty Login", "home": "faculty_visitors"},
}


def register(app: Flask, container: Container) -> None:
    def _login_view(role: Role):
        portal = PORTALS[role]
        user = current_user()
        if user is not None and user.has_role(role):
            return redirect(url_for(portal["home"]))

        if request.method == "POST":
            username = request.form.get("username", "")
            password = request.form.get("password", "")
            try:
                s_user = container.auth_service.login(username, password, required_role=role)
                store_user(s_user)
                flash("Login successful!", "success")
                return redirect(url_for(portal["home"]))
            except ValidationError as e:
                flash(str(e), "warning")
            except (AuthenticationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Unexpected login failure")
                flash("Login failed", "danger")

        return render_template(
            "login.html",
            title=portal["title"],
            action=url_for(LOGIN_ENDPOINTS[role]),
        )

    @app.route("/", endpoint="index")
    def index():
        return render_template("index.html")

    @app.route("/admin/login", methods=["GET", "POST"], endpoint="admin_login")
    def admin_login():
        return _login_view(Role.ADMIN)

    @app.route("/guard/login", methods=["GET", "POST"], endpoint="guard_login")
    def guard_login():
        return _login_view(Role.GUARD)

    @app.route("/departments/login", methods=["GET", "POST"], endpoint="department_login")
    def department_login():
        return _login_view(Role.DEPARTMENT)

    @app.route("/faculty/login", methods=["GET", "POST"], endpoint="faculty_login")
    def faculty_login():
        return _login_view(Role.PROFESSOR)

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    def logout():
        user = current_user()
        target = LOGIN_ENDPOINTS.get(user.role, "index") if user and user.role else "index"
        if user is not None:
            container.auth_service.logout(user.token)
            logger.info("User %s logged out", user.username)
        forget_user()
        flash("You have been logged out.", "info")
        return redirect(url_for(target))
