from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


STATUS_PENDING = "PENDING"
STATUS_APPROVED = "APPROVED"
STATUS_RECEIVED = "RECEIVED"
STATUS_COMPLETED = "COMPLETED"

PURCHASE_ORDER_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_RECEIVED, STATUS_COMPLETED)

# Remote status -> console status. Anything not listed is PENDING.
REMOTE_STATUS_MAP: Dict[str, str] = {
    "DRAFT": STATUS_PENDING,
    "SENT": STATUS_PENDING,
    "CONFIRMED": STATUS_APPROVED,
    "PARTIALLY_RECEIVED": STATUS_RECEIVED,
    "RECEIVED": STATUS_RECEIVED,
}

UNKNOWN_SUPPLIER = "Unknown"
UNKNOWN_ITEM = "Unknown Item"
PLACEHOLDER_ITEM_ID = "507f1f77bcf86cd799439011"


def _safe_str(value: object | None) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    return raw or None


def _safe_float(value: object | None, default: float = 0.0) -> float:
    if value is None:
        return float(default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


@dataclass
class PurchaseOrderItem:
    item_name: str
    quantity: float = 0.0
    unit_price: float = 0.0
    total_price: float = 0.0
    item_id: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "itemName": self.item_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
        }
        if self.item_id:
            payload["itemId"] = self.item_id
        return payload

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "PurchaseOrderItem":
        data = dict(payload or {})
        quantity = _safe_float(data.get("quantity"), 0.0)
        unit_price = _safe_float(data.get("unitPrice"), 0.0)
        total_raw = data.get("totalPrice")
        return PurchaseOrderItem(
            item_id=_safe_str(data.get("itemId")),
            item_name=str(data.get("itemName") or ""),
            quantity=quantity,
            unit_price=unit_price,
            total_price=quantity * unit_price if total_raw in (None, "") else _safe_float(total_raw, 0.0),
        )


@dataclass
class PurchaseOrder:
    id: str
    order_number: str
    supplier: str
    order_date: str
    expected_date: str
    status: str = STATUS_PENDING
    total_amount: float = 0.0
    items: List[PurchaseOrderItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "orderNumber": self.order_number,
            "supplier": self.supplier,
            "orderDate": self.order_date,
            "expectedDate": self.expected_date,
            "status": self.status,
            "totalAmount": self.total_amount,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class PurchaseOrderInput:
    """Create/update request in the console's shape.

    For updates every field is optional; ``None`` means "leave as is".
    """

    supplier: str | None = None
    order_date: str | None = None
    expected_date: str | None = None
    items: List[PurchaseOrderItem] | None = None
    supplier_id: str | None = None
    notes: str | None = None
    delivery_address: str | None = None
    terms: str | None = None

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "PurchaseOrderInput":
        data = dict(payload or {})
        items_raw = data.get("items")
        items = None
        if isinstance(items_raw, list):
            items = [PurchaseOrderItem.from_dict(item) for item in items_raw if isinstance(item, dict)]
        return PurchaseOrderInput(
            supplier=_safe_str(data.get("supplier")),
            order_date=_safe_str(data.get("orderDate")),
            expected_date=_safe_str(data.get("expectedDate")),
            items=items,
            supplier_id=_safe_str(data.get("supplierId")),
            notes=_safe_str(data.get("notes")),
            delivery_address=_safe_str(data.get("deliveryAddress")),
            terms=_safe_str(data.get("terms")),
        )


def validate_create_input(order_input: PurchaseOrderInput) -> list[str]:
    errors: list[str] = []
    if not order_input.supplier:
        errors.append("supplier is required")
    if not order_input.order_date:
        errors.append("orderDate is required")
    if not order_input.items:
        errors.append("items must be a non-empty list")
    else:
        for idx, item in enumerate(order_input.items):
            if not item.item_name.strip():
                errors.append(f"items[{idx}].itemName is required")
            if item.quantity <= 0:
                errors.append(f"items[{idx}].quantity must be > 0")
            if item.unit_price < 0:
                errors.append(f"items[{idx}].unitPrice must be >= 0")
    return errors
