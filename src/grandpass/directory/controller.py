from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.paging import paginate
from ..container import Container
from ..core.constants import DIRECTORY_ROWS_PER_PAGE
from ..core.enums import Role
from ..core.exceptions import ApiError, ValidationError
from ..core.logger import get_logger
from ..users.access import current_user, login_required

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    offices_svc = container.office_service
    professors_svc = container.professor_service
    catalog_svc = container.catalog_service

    def _run(action, success_message: str) -> bool:
        """Run a mutation and flash its outcome."""
        try:
            action()
        except ValidationError as e:
            flash(str(e), "warning")
            return False
        except ApiError as e:
            logger.error("Directory update failed: %s", e)
            flash(str(e), "danger")
            return False
        flash(success_message, "success")
        return True

    def _load(fetch, what: str):
        try:
            return list(fetch())
        except ApiError as e:
            logger.error("Could not load %s: %s", what, e)
            flash(str(e), "danger")
            return []

    def _page(items):
        return paginate(items, request.args.get("page", 1, type=int), DIRECTORY_ROWS_PER_PAGE)

    # ---- offices -------------------------------------------------------

    @app.route("/admin/offices", methods=["GET", "POST"], endpoint="admin_offices")
    @login_required(Role.ADMIN)
    def admin_offices():
        if request.method == "POST":
            _run(lambda: offices_svc.create(request.form.get("name")), "Office added.")
            return redirect(url_for("admin_offices"))

        offices = _load(offices_svc.list_offices, "offices")
        q = request.args.get("q", "").strip().lower()
        if q:
            offices = [o for o in offices if q in o.name.lower()]
        return render_template("admin/offices.html", page=_page(offices), q=q, active_page="offices")

    @app.route("/admin/offices/<office_id>/edit", methods=["POST"], endpoint="admin_office_edit")
    @login_required(Role.ADMIN)
    def admin_office_edit(office_id: str):
        _run(lambda: offices_svc.rename(office_id, request.form.get("name")), "Office updated.")
        return redirect(url_for("admin_offices"))

    @app.route("/admin/offices/<office_id>/delete", methods=["POST"], endpoint="admin_office_delete")
    @login_required(Role.ADMIN)
    def admin_office_delete(office_id: str):
        _run(lambda: offices_svc.delete(office_id), "Office deleted.")
        return redirect(url_for("admin_offices"))

    @app.route("/admin/departments", endpoint="admin_departments")
    @login_required(Role.ADMIN)
    def admin_departments():
        departments = _load(offices_svc.list_departments, "departments")
        return render_template("admin/departments.html", departments=departments, active_page="departments")

    # ---- professors ----------------------------------------------------

    @app.route("/admin/professors", methods=["GET", "POST"], endpoint="admin_professors")
    @login_required(Role.ADMIN)
    def admin_professors():
        if request.method == "POST":
            try:
                created = professors_svc.create(request.form)
            except ValidationError as e:
                flash(str(e), "warning")
            except ApiError as e:
                logger.error("Professor create failed: %s", e)
                flash(str(e) or "Failed to create professor", "danger")
            else:
                if created.account_error:
                    flash(f"Professor saved, but account creation failed. Reason: {created.account_error}", "warning")
                else:
                    flash(
                        f"Employee created with account. Username: {created.username} "
                        f"Temp Password: {created.temp_password}",
                        "success",
                    )
            return redirect(url_for("admin_professors"))

        dept_id = request.args.get("dept_id", "").strip()
        professors = _load(lambda: professors_svc.list_professors(dept_id or None), "professors")
        offices = _load(offices_svc.list_offices, "offices")
        return render_template(
            "admin/professors.html",
            page=_page(professors),
            offices=offices,
            office_names={str(o.id): o.name for o in offices},
            dept_id=dept_id,
            active_page="professors",
        )

    @app.route("/admin/professors/<prof_id>/edit", methods=["POST"], endpoint="admin_professor_edit")
    @login_required(Role.ADMIN)
    def admin_professor_edit(prof_id: str):
        _run(lambda: professors_svc.update(prof_id, request.form), "Professor updated.")
        return redirect(url_for("admin_professors"))

    @app.route("/departments/professors", endpoint="department_professors")
    @login_required(Role.DEPARTMENT, Role.ADMIN)
    def department_professors():
        professors = []
        try:
            professors = list(professors_svc.department_professors(current_user().dept_id))
        except ValidationError as e:
            flash(str(e), "warning")
        except ApiError as e:
            logger.error("Department professors failed: %s", e)
            flash(str(e) or "Failed to load professors", "danger")
        return render_template("departments/professors.html", page=_page(professors), active_page="professors")

    # ---- services ------------------------------------------------------

    @app.route("/admin/services", methods=["GET", "POST"], endpoint="admin_services")
    @login_required(Role.ADMIN)
    def admin_services():
        if request.method == "POST":
            _run(
                lambda: catalog_svc.create(
                    request.form.get("name"), request.form.get("dept_id"), request.form.get("description")
                ),
                "Service added.",
            )
            return redirect(url_for("admin_services"))

        services = _load(catalog_svc.list_services, "services")
        offices = _load(offices_svc.list_offices, "offices")
        return render_template(
            "admin/services.html",
            page=_page(services),
            offices=offices,
            office_names={str(o.id): o.name for o in offices},
            active_page="services",
        )

    @app.route("/admin/services/<service_id>/edit", methods=["POST"], endpoint="admin_service_edit")
    @login_required(Role.ADMIN)
    def admin_service_edit(service_id: str):
        _run(
            lambda: catalog_svc.update(
                service_id, request.form.get("name"), request.form.get("dept_id"), request.form.get("description")
            ),
            "Service updated.",
        )
        return redirect(url_for("admin_services"))

    @app.route("/admin/services/<service_id>/delete", methods=["POST"], endpoint="admin_service_delete")
    @login_required(Role.ADMIN)
    def admin_service_delete(service_id: str):
        _run(lambda: catalog_svc.delete(service_id), "Service deleted.")
        return redirect(url_for("admin_services"))

    # ---- faculty profile -----------------------------------------------

    @app.route("/faculty/profile", methods=["GET", "POST"], endpoint="faculty_profile")
    @login_required(Role.PROFESSOR)
    def faculty_profile():
        prof_id = current_user().prof_id
        if request.method == "POST":
            _run(lambda: container.profile_service.save(prof_id, request.form), "Profile updated")
            return redirect(url_for("faculty_profile"))

        profile = {}
        try:
            profile = container.profile_service.load(prof_id)
        except ValidationError as e:
            flash(str(e), "warning")
        except ApiError as e:
            logger.error("Profile load failed: %s", e)
            flash(str(e) or "Failed to load profile", "danger")
        return render_template("faculty/profile.html", profile=profile, active_page="profile")
