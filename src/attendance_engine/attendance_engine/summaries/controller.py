from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, session

from ..common.auth import admin_required, login_required
from ..common.datetime_utils import month_bounds, month_key, parse_iso_date
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _target_user() -> int:
        """Admins may read any user; everyone else only themselves."""
        own = int(session["user_id"])
        requested = request.args.get("user_id")
        if not requested or int(requested) == own:
            return own
        if session.get("role") != Role.ADMIN.value:
            raise AuthorizationError("Only admins may read other users' summaries")
        return int(requested)

    def _month() -> str:
        value = (request.args.get("month") or month_key(date.today())).strip()
        month_bounds(value)
        return value

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403

    @app.route("/summaries/daily", methods=["GET"], endpoint="daily_summaries")
    @login_required
    def daily_summaries():
        try:
            user_id = _target_user()
            work_month = _month()
        except ValueError:
            return jsonify({"success": False, "message": "Invalid user_id or month (YYYY-MM)"}), 400
        first, last = month_bounds(work_month)
        rows = container.summaries_repo.list_daily(user_id, first, last)
        return jsonify({"success": True, "user_id": user_id, "month": work_month, "rows": [r.to_dict() for r in rows]})

    @app.route("/summaries/monthly", methods=["GET"], endpoint="monthly_summaries")
    @login_required
    def monthly_summaries():
        try:
            work_month = _month()
            if session.get("role") == Role.ADMIN.value and not request.args.get("user_id"):
                stats = container.summaries_repo.list_monthly(work_month)
            else:
                stats = container.summaries_repo.list_monthly(work_month, user_id=_target_user())
        except ValueError:
            return jsonify({"success": False, "message": "Invalid user_id or month (YYYY-MM)"}), 400
        return jsonify({"success": True, "month": work_month, "rows": [s.to_dict() for s in stats]})

    @app.route("/admin/summaries/recompute", methods=["POST"], endpoint="admin_recompute")
    @admin_required
    def admin_recompute():
        data = request.get_json(silent=True) or request.form
        try:
            user_id = int(data.get("user_id"))
            start = parse_iso_date(str(data.get("start_date", "")).strip())
            end = parse_iso_date(str(data.get("end_date", "")).strip())
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "user_id, start_date and end_date (YYYY-MM-DD) are required"}), 400

        report = container.materializer.recompute_range(user_id, start, end)
        return jsonify({"success": not report.failures, **report.as_dict()}), 200
