from __future__ import annotations

import io

from flask import Flask, flash, jsonify, redirect, render_template, request, send_file, url_for

from ..container import Container
from ..core.exceptions import ApiError, ValidationError
from ..core.logger import get_logger
from .model import RegistrationForm
from .service import qr_png

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    registration = container.registration_service

    def _offices():
        try:
            return list(registration.offices())
        except ApiError as e:
            logger.warning("Could not load offices for registration: %s", e)
            flash(str(e), "danger")
            return []

    def _form_from_request(offices) -> RegistrationForm:
        office_ids = [o for o in request.form.getlist("offices") if o.strip()]
        professor_by_office = {
            office_id: request.form.get(f"professor_{office_id}", "").strip()
            for office_id in office_ids
            if request.form.get(f"professor_{office_id}", "").strip()
        }
        professor_names = {}
        if professor_by_office:
            for profs in registration.professors_for_offices(professor_by_office.keys()).values():
                for prof in profs:
                    if prof.name:
                        professor_names[str(prof.id)] = prof.name

        return RegistrationForm(
            first_name=request.form.get("first_name", ""),
            middle_name=request.form.get("middle_name", ""),
            last_name=request.form.get("last_name", ""),
            gender=request.form.get("gender", ""),
            birth_date=request.form.get("birth_date", ""),
            email=request.form.get("email", ""),
            phone=request.form.get("phone", ""),
            purpose=request.form.get("purpose", ""),
            office_ids=office_ids,
            professor_by_office=professor_by_office,
            offices={str(o.id): o.name for o in offices if o.name},
            professor_names=professor_names,
        )

    @app.route("/registration", methods=["GET", "POST"], endpoint="registration")
    def registration_page():
        offices = _offices()

        if request.method == "POST":
            try:
                visitors_id = registration.register(_form_from_request(offices))
                flash("Registration successful!", "success")
                return redirect(url_for("visitor_pass", visitorID=visitors_id))
            except ValidationError as e:
                flash(str(e), "warning")
            except ApiError as e:
                logger.error("Registration failed: %s", e)
                flash(str(e) or "Error occurred", "danger")

        return render_template("registration/register.html", offices=offices, form=request.form)

    @app.route("/api/registration/professors", endpoint="api_registration_professors")
    def api_registration_professors():
        grouped = registration.professors_for_offices(request.args.getlist("office"))
        return jsonify(
            {
                office_id: [{"id": p.id, "name": p.name or ""} for p in profs]
                for office_id, profs in grouped.items()
            }
        )

    @app.route("/registration/print", endpoint="visitor_pass")
    def visitor_pass():
        visitors_id = request.args.get("visitorID", "")
        try:
            visitor_pass = container.visitor_pass_service.pass_for(visitors_id)
        except ValidationError as e:
            return render_template("registration/print.html", visitor_pass=None, error=str(e)), 404
        except ApiError as e:
            logger.error("Pass for %s failed: %s", visitors_id, e)
            return render_template("registration/print.html", visitor_pass=None, error=str(e)), 502
        return render_template("registration/print.html", visitor_pass=visitor_pass, error=None)

    @app.route("/visitors/<visitors_id>/qr.png", endpoint="visitor_qr")
    def visitor_qr(visitors_id: str):
        return send_file(io.BytesIO(qr_png(visitors_id)), mimetype="image/png")
