from __future__ import annotations

from flask import Blueprint, jsonify

from erp_console.context import current_context
from erp_console.policies import require_session


dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/dashboard", methods=["GET"])
@require_session()
def dashboard():
    context = current_context()
    overview = context.dashboard_service.load_overview()
    user = context.session_store.user
    payload = overview.to_dict()
    payload["user"] = user.to_dict() if user else None
    return jsonify(payload)
