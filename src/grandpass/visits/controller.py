from __future__ import annotations

import io

from flask import Flask, abort, flash, redirect, render_template, request, send_file, url_for

from ..common.datetime_utils import manila_today
from ..common.paging import paginate
from ..container import Container
from ..core.constants import DASHBOARD_ROWS_PER_PAGE
from ..core.enums import ReportFilter, Role
from ..core.exceptions import ApiError, ValidationError
from ..core.logger import get_logger
from ..reports.export import (
    CSV_MIMETYPE,
    DEPARTMENT_COLUMNS,
    EXCEL_MIMETYPE,
    FACULTY_COLUMNS,
    GROUPED_COLUMNS,
    PDF_MIMETYPE,
    rows_for_department,
    rows_for_faculty,
    rows_for_grouped,
    to_csv,
    to_excel,
    to_pdf,
)
from ..users.access import current_user, login_required
from .service import search

logger = get_logger(__name__)

EXPORT_FORMATS = {
    "csv": CSV_MIMETYPE,
    "xlsx": EXCEL_MIMETYPE,
    "pdf": PDF_MIMETYPE,
}


def _parse_filter(value, default: ReportFilter, allowed=tuple(ReportFilter)) -> ReportFilter:
    try:
        parsed = ReportFilter(value or default.value)
    except ValueError:
        return default
    return parsed if parsed in allowed else default


def _send_export(rows, columns, fmt: str, *, filename: str, title: str):
    mimetype = EXPORT_FORMATS.get(fmt)
    if mimetype is None:
        abort(404)

    if fmt == "csv":
        data = to_csv(rows, columns)
    elif fmt == "xlsx":
        data = to_excel(rows, columns, sheet=title)
    else:
        data = to_pdf(rows, columns, title)

    return send_file(
        io.BytesIO(data),
        mimetype=mimetype,
        as_attachment=True,
        download_name=f"{filename}.{fmt}",
    )


def register(app: Flask, container: Container) -> None:
    reports = container.visit_report_service

    def _grouped_from_args():
        report_filter = _parse_filter(request.args.get("filter"), ReportFilter.TODAY)
        groups = reports.build_grouped_report(
            report_filter,
            date_from=request.args.get("from") or None,
            date_to=request.args.get("to") or None,
        )
        return report_filter, search(groups, request.args.get("q"))

    @app.route("/admin/dashboard", endpoint="admin_dashboard")
    @login_required(Role.ADMIN)
    def admin_dashboard():
        stats = container.visitor_stats_service.counts()
        report_filter = _parse_filter(request.args.get("filter"), ReportFilter.TODAY)
        groups = []
        try:
            report_filter, groups = _grouped_from_args()
        except ValidationError as e:
            flash(str(e), "warning")
        except ApiError as e:
            logger.error("Dashboard report failed: %s", e)
            flash(str(e), "danger")

        page = paginate(groups, request.args.get("page", 1, type=int), DASHBOARD_ROWS_PER_PAGE)
        return render_template(
            "admin/dashboard.html",
            stats=stats,
            page=page,
            report_filter=report_filter.value,
            date_from=request.args.get("from", ""),
            date_to=request.args.get("to", ""),
            q=request.args.get("q", ""),
            active_page="dashboard",
        )

    @app.route("/admin/dashboard/export/<fmt>", endpoint="admin_dashboard_export")
    @login_required(Role.ADMIN)
    def admin_dashboard_export(fmt: str):
        try:
            _, groups = _grouped_from_args()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_dashboard", **request.args))
        except ApiError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_dashboard", **request.args))

        return _send_export(
            rows_for_grouped(groups),
            GROUPED_COLUMNS,
            fmt,
            filename="office_visits_report",
            title="Office Visits",
        )

    def _department_rows(report_filter: ReportFilter):
        user = current_user()
        return reports.department_report(user.dept_id, report_filter)

    @app.route("/departments/reports", endpoint="department_reports")
    @login_required(Role.DEPARTMENT, Role.ADMIN)
    def department_reports():
        report_filter = _parse_filter(
            request.args.get("filter"), ReportFilter.TODAY, allowed=(ReportFilter.TODAY, ReportFilter.MONTH)
        )
        rows = []
        try:
            rows = _department_rows(report_filter)
        except ValidationError as e:
            flash(str(e), "warning")
        except ApiError as e:
            logger.error("Department report failed: %s", e)
            flash(str(e) or "Failed to load data", "danger")

        return render_template(
            "departments/reports.html",
            rows=rows,
            report_filter=report_filter.value,
            active_page="reports",
        )

    @app.route("/departments/reports/export/<fmt>", endpoint="department_reports_export")
    @login_required(Role.DEPARTMENT, Role.ADMIN)
    def department_reports_export(fmt: str):
        report_filter = _parse_filter(
            request.args.get("filter"), ReportFilter.TODAY, allowed=(ReportFilter.TODAY, ReportFilter.MONTH)
        )
        try:
            rows = _department_rows(report_filter)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("department_reports", filter=report_filter.value))
        except ApiError as e:
            flash(str(e), "danger")
            return redirect(url_for("department_reports", filter=report_filter.value))

        ymd = manila_today().isoformat()
        return _send_export(
            rows_for_department(rows),
            DEPARTMENT_COLUMNS,
            fmt,
            filename=f"department_visits_{report_filter.value}_{ymd}",
            title="Department Visits",
        )

    def _faculty_rows():
        return reports.faculty_visits(current_user().prof_id)

    @app.route("/faculty/visitors", endpoint="faculty_visitors")
    @login_required(Role.PROFESSOR)
    def faculty_visitors():
        rows = []
        try:
            rows = _faculty_rows()
        except ValidationError as e:
            flash(str(e), "warning")
        except ApiError as e:
            logger.error("Faculty visitors failed: %s", e)
            flash(str(e), "danger")
        return render_template("faculty/visitors.html", rows=rows, active_page="visitors")

    @app.route("/faculty/visitors/export/<fmt>", endpoint="faculty_visitors_export")
    @login_required(Role.PROFESSOR)
    def faculty_visitors_export(fmt: str):
        try:
            rows = _faculty_rows()
        except (ValidationError, ApiError) as e:
            flash(str(e), "warning" if isinstance(e, ValidationError) else "danger")
            return redirect(url_for("faculty_visitors"))
        return _send_export(
            rows_for_faculty(rows),
            FACULTY_COLUMNS,
            fmt,
            filename=f"my_visitors_{manila_today().isoformat()}",
            title="My Visitors",
        )
