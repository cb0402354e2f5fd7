from __future__ import annotations

from flask import Blueprint, jsonify, redirect, request

from erp_console.context import current_context
from erp_console.contexts.auth.domain.contracts import ProfileUpdateInput, RegisterInput
from erp_console.errors import IntegrationError, ValidationError
from erp_console.errors import PermissionError as AppPermissionError
from erp_console.policies import normalize_role, require_session


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _text(payload: dict, key: str) -> str | None:
    value = str(payload.get(key) or "").strip()
    return value or None


def _session_payload() -> dict:
    session = current_context().session_store.snapshot()
    return {
        "isAuthenticated": session.is_authenticated,
        "isLoading": session.is_loading,
        "user": session.user.to_dict() if session.user else None,
    }


@auth_bp.route("/login", methods=["POST"])
def login():
    payload = _json_body()
    email = (_text(payload, "email") or "").lower()
    password = str(payload.get("password") or "")
    if not email or not password:
        raise ValidationError(code="auth_missing_credentials", message_key="validation_error")

    auth_client = current_context().auth_client
    result = auth_client.login(email, password)
    status_code = 200 if auth_client.is_authenticated() else 401
    return jsonify(result.to_dict()), status_code


@auth_bp.route("/register", methods=["POST"])
def register():
    payload = _json_body()
    name = _text(payload, "name")
    email = (_text(payload, "email") or "").lower()
    password = str(payload.get("password") or "")
    if not name or not email or not password:
        raise ValidationError(code="auth_missing_fields", message_key="validation_error")

    raw_role = _text(payload, "role")
    user_input = RegisterInput(
        name=name,
        email=email,
        password=password,
        role=normalize_role(raw_role) if raw_role else None,
        department=_text(payload, "department"),
        position=_text(payload, "position"),
        phone=_text(payload, "phone"),
    )
    auth_client = current_context().auth_client
    result = auth_client.register(user_input)
    status_code = 201 if auth_client.is_authenticated() else 400
    return jsonify(result.to_dict()), status_code


@auth_bp.route("/logout", methods=["POST"])
def logout():
    target = current_context().auth_client.logout()
    return redirect(target)


@auth_bp.route("/session", methods=["GET"])
def session_state():
    return jsonify(_session_payload())


@auth_bp.route("/me", methods=["GET"])
@require_session(verify=False)
def me():
    auth_client = current_context().auth_client
    user = auth_client.get_current_user()
    if user is not None:
        return jsonify({"status": "success", "data": {"user": user.to_dict()}})
    if not auth_client.is_authenticated():
        raise AppPermissionError(code="auth_required", message_key="auth_required", http_status=401)
    raise IntegrationError(code="current_user_unavailable", message_key="api_unavailable")


@auth_bp.route("/me", methods=["PATCH"])
@require_session()
def update_me():
    payload = _json_body()
    updates = ProfileUpdateInput(
        name=_text(payload, "name"),
        department=_text(payload, "department"),
        position=_text(payload, "position"),
        phone=_text(payload, "phone"),
    )
    auth_client = current_context().auth_client
    result = auth_client.update_profile(updates)
    # The session keeps its user until refreshed explicitly.
    if str(request.args.get("refresh") or "").strip().lower() in {"1", "true", "yes"}:
        auth_client.get_current_user()
    return jsonify(result.to_dict()), 200 if result.status == "success" else 400


@auth_bp.route("/change-password", methods=["POST"])
@require_session()
def change_password():
    payload = _json_body()
    current_password = str(payload.get("passwordCurrent") or "")
    new_password = str(payload.get("password") or "")
    confirm_password = str(payload.get("passwordConfirm") or "")
    if not current_password or not new_password:
        raise ValidationError(code="password_missing_fields", message_key="validation_error")

    result = current_context().auth_client.change_password(current_password, new_password, confirm_password)
    return jsonify(result.to_dict()), 200 if result.status == "success" else 400
