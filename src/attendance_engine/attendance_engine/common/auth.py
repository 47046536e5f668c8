from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def login_required(view):
    """Session-based guard; authentication itself happens outside this app."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Login required"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "message": "Admin role required"}), 403
        return view(*args, **kwargs)

    return wrapper
