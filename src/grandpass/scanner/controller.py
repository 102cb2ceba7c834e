from __future__ import annotations

from flask import Flask, jsonify, render_template, request, url_for
from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..container import Container
from ..core.constants import SCANNER_REARM_SECONDS
from ..core.enums import Role, ScanStatus
from ..core.exceptions import ValidationError
from ..core.logger import get_logger
from ..users.access import current_user, login_required

logger = get_logger(__name__)

STATUS_CODES = {
    ScanStatus.TAGGED: 200,
    ScanStatus.RECORDED: 200,
    ScanStatus.NOT_FOUND: 404,
    ScanStatus.BUSY: 409,
    ScanStatus.ERROR: 502,
}

SCANNER_ROLES = (Role.GUARD, Role.DEPARTMENT, Role.ADMIN)


def decode_qr_image(stream) -> str:
    """Text of the first QR / barcode found in an uploaded image."""
    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("The uploaded file is not an image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8", errors="replace").strip()


def register(app: Flask, container: Container) -> None:
    scanner = container.qr_tag_service

    def _render_scanner(mode: str):
        return render_template(
            "scanner/scan.html",
            mode=mode,
            scan_url=url_for("api_scan"),
            image_url=url_for("api_scan_image"),
            rearm_seconds=SCANNER_REARM_SECONDS,
            active_page="scanner",
        )

    @app.route("/guard/scanner", endpoint="guard_scanner")
    @login_required(Role.GUARD)
    def guard_scanner():
        return _render_scanner("guard")

    @app.route("/departments/scanner", endpoint="department_scanner")
    @login_required(Role.DEPARTMENT, Role.ADMIN)
    def department_scanner():
        return _render_scanner("department")

    def _process(code: str):
        user = current_user()
        department_mode = user.role != Role.GUARD
        station_key = f"{int(user.role) if user.role else 0}:{user.username}"

        outcome = scanner.scan(
            station_key,
            code,
            dept_id=user.dept_id,
            department_mode=department_mode,
        )
        return jsonify(outcome.to_json()), STATUS_CODES.get(outcome.status, 200)

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @login_required(*SCANNER_ROLES)
    def api_scan():
        data = request.get_json(silent=True) or {}
        code = str(data.get("code") or "").strip()
        if not code:
            return jsonify({"success": False, "message": "QR code is empty"}), 400
        try:
            return _process(code)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Scan failed")
            return jsonify({"success": False, "message": "Failed to process scan."}), 500

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    @login_required(*SCANNER_ROLES)
    def api_scan_image():
        file = request.files.get("image")
        if file is None or not file.filename:
            return jsonify({"success": False, "message": "Please upload an image"}), 400
        try:
            code = decode_qr_image(file.stream)
            return _process(code)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Image scan failed")
            return jsonify({"success": False, "message": "Failed to process scan."}), 500
