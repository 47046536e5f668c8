from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session
from werkzeug.utils import secure_filename

from ..common.auth import admin_required, login_required
from ..common.validators import require_non_empty
from ..core.enums import PunchKind
from ..core.exceptions import BatchFormatError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/punches/upload", methods=["POST"], endpoint="admin_punch_upload")
    @admin_required
    def admin_punch_upload():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return jsonify({"success": False, "message": "A CSV file is required"}), 400

        filename = secure_filename(upload.filename)
        overwrite = _flag(request.form.get("overwrite"))
        try:
            result = container.ingestion_service.ingest_csv(upload.read(), overwrite=overwrite)
        except BatchFormatError as e:
            logger.info("Rejected upload %s: %s", filename, e)
            return jsonify({"success": False, "message": str(e)}), 400

        logger.info("Upload %s processed by user %s", filename, session.get("user_id"))
        return jsonify({"success": True, "file": filename, **result.as_dict()}), 200

    @app.route("/punches", methods=["POST"], endpoint="web_punch")
    @login_required
    def web_punch():
        data = request.get_json(silent=True) or request.form
        try:
            kind_text = require_non_empty(str(data.get("kind") or ""), "kind")
            kind = PunchKind(kind_text.upper())
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except ValueError:
            return jsonify({"success": False, "message": "kind must be CHECK_IN or CHECK_OUT"}), 400

        result = container.ingestion_service.submit_web_punch(
            int(session["user_id"]),
            kind,
            had_dinner=_flag(data.get("had_dinner")),
            location_text=data.get("location"),
        )

        ok = result.inserted + result.overwritten == 1
        return jsonify({"success": ok, **result.as_dict()}), (200 if ok else 409)
