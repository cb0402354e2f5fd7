from __future__ import annotations

from flask import Blueprint, jsonify, request

from erp_console.context import current_context
from erp_console.contexts.auth.domain.contracts import ROLE_MANAGER
from erp_console.contexts.purchase.domain.contracts import PURCHASE_ORDER_STATUSES, PurchaseOrderInput
from erp_console.errors import ValidationError
from erp_console.policies import require_session
from erp_console.ui_strings import operator_message, status_label, success_message


purchase_bp = Blueprint("purchase", __name__, url_prefix="/purchase")


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _order_payload(order) -> dict:
    payload = order.to_dict()
    payload["statusLabel"] = status_label("purchase_order", order.status)
    return payload


@purchase_bp.route("/orders", methods=["GET"])
@require_session()
def list_orders():
    status_filter = str(request.args.get("status") or "").strip().upper()
    if status_filter and status_filter not in PURCHASE_ORDER_STATUSES:
        raise ValidationError(code="status_invalid", details=operator_message("invalid_status_filter", status=status_filter))

    orders = current_context().purchase_service.get_purchase_orders()
    if status_filter:
        orders = [order for order in orders if order.status == status_filter]
    return jsonify({"items": [_order_payload(order) for order in orders], "total": len(orders)})


@purchase_bp.route("/orders", methods=["POST"])
@require_session()
def create_order():
    order_input = PurchaseOrderInput.from_dict(_json_body())
    order = current_context().purchase_service.create_purchase_order(order_input)
    return jsonify({"order": _order_payload(order), "message": success_message("order_created")}), 201


@purchase_bp.route("/orders/<order_id>", methods=["GET"])
@require_session()
def get_order(order_id: str):
    order = current_context().purchase_service.get_purchase_order(order_id)
    return jsonify({"order": _order_payload(order)})


@purchase_bp.route("/orders/<order_id>", methods=["PUT"])
@require_session()
def update_order(order_id: str):
    order_input = PurchaseOrderInput.from_dict(_json_body())
    order = current_context().purchase_service.update_purchase_order(order_id, order_input)
    return jsonify({"order": _order_payload(order), "message": success_message("order_updated")})


@purchase_bp.route("/orders/<order_id>", methods=["DELETE"])
@require_session(role=ROLE_MANAGER)
def delete_order(order_id: str):
    current_context().purchase_service.delete_purchase_order(order_id)
    return jsonify({"id": order_id, "message": success_message("order_deleted")})
