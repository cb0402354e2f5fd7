from __future__ import annotations

from typing import Any, Dict, List

from erp_console.contexts.purchase.domain.contracts import (
    PLACEHOLDER_ITEM_ID,
    REMOTE_STATUS_MAP,
    STATUS_PENDING,
    UNKNOWN_ITEM,
    UNKNOWN_SUPPLIER,
    PurchaseOrder,
    PurchaseOrderInput,
    PurchaseOrderItem,
)


def map_remote_status(raw_status: str | None) -> str:
    return REMOTE_STATUS_MAP.get(str(raw_status or ""), STATUS_PENDING)


def date_only(value: object | None) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    return raw.split("T", 1)[0]


def _nested_name(value: object | None) -> str | None:
    if not isinstance(value, dict):
        return None
    name = str(value.get("name") or "").strip()
    return name or None


def _as_float(value: object | None) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def map_remote_item(raw_item: Dict[str, Any]) -> PurchaseOrderItem:
    item = dict(raw_item or {})
    item_ref = item.get("itemId")
    item_name = _nested_name(item.get("item")) or _nested_name(item_ref) or UNKNOWN_ITEM
    item_id = None
    if isinstance(item_ref, dict):
        item_id = str(item_ref.get("_id") or "").strip() or None
    elif item_ref:
        item_id = str(item_ref)
    return PurchaseOrderItem(
        item_id=item_id,
        item_name=item_name,
        quantity=_as_float(item.get("quantity")),
        unit_price=_as_float(item.get("unitPrice")),
        total_price=_as_float(item.get("totalPrice")),
    )


def map_remote_purchase_order(raw_order: Dict[str, Any]) -> PurchaseOrder:
    order = dict(raw_order or {})
    order_date = date_only(order.get("orderDate")) or ""
    supplier_name = _nested_name(order.get("supplier")) or _nested_name(order.get("supplierId")) or UNKNOWN_SUPPLIER
    raw_items = order.get("items") if isinstance(order.get("items"), list) else []
    return PurchaseOrder(
        id=str(order.get("_id") or order.get("id") or ""),
        order_number=str(order.get("orderNumber") or ""),
        supplier=supplier_name,
        order_date=order_date,
        expected_date=date_only(order.get("expectedDeliveryDate")) or order_date,
        status=map_remote_status(order.get("status")),
        total_amount=_as_float(order.get("totalAmount")),
        items=[map_remote_item(item) for item in raw_items if isinstance(item, dict)],
    )


def map_created_purchase_order(raw_order: Dict[str, Any], order_input: PurchaseOrderInput) -> PurchaseOrder:
    """The create endpoint echoes little; the caller's values fill the rest."""
    order = dict(raw_order or {})
    return PurchaseOrder(
        id=str(order.get("_id") or order.get("id") or ""),
        order_number=str(order.get("orderNumber") or ""),
        supplier=order_input.supplier or UNKNOWN_SUPPLIER,
        order_date=order_input.order_date or "",
        expected_date=order_input.expected_date or order_input.order_date or "",
        status=STATUS_PENDING,
        total_amount=_as_float(order.get("totalAmount")),
        items=list(order_input.items or []),
    )


def map_updated_purchase_order(raw_order: Dict[str, Any], order_input: PurchaseOrderInput) -> PurchaseOrder:
    mapped = map_remote_purchase_order(raw_order)
    if order_input.supplier:
        mapped.supplier = order_input.supplier
    if order_input.order_date:
        mapped.order_date = order_input.order_date
    if order_input.expected_date:
        mapped.expected_date = order_input.expected_date
    if order_input.items is not None:
        mapped.items = list(order_input.items)
    return mapped


def _map_outbound_items(items: List[PurchaseOrderItem]) -> List[Dict[str, Any]]:
    return [
        {
            "itemId": item.item_id or PLACEHOLDER_ITEM_ID,
            "quantity": item.quantity,
            "unitPrice": item.unit_price,
        }
        for item in items
    ]


def map_input_to_remote_payload(order_input: PurchaseOrderInput) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "supplierId": order_input.supplier_id,
        "orderDate": order_input.order_date,
        "expectedDeliveryDate": order_input.expected_date,
        "items": None if order_input.items is None else _map_outbound_items(order_input.items),
        "notes": order_input.notes,
        "deliveryAddress": order_input.delivery_address,
        "terms": order_input.terms,
    }
    return {key: value for key, value in payload.items() if value is not None}
