from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


def _text(value: object | None, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip() or default


def _int(value: object | None, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class DashboardStat:
    name: str
    value: str
    change: str
    change_type: str = "positive"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value, "change": self.change, "changeType": self.change_type}

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "DashboardStat":
        data = dict(payload or {})
        change_type = _text(data.get("changeType"), "positive").lower()
        return DashboardStat(
            name=_text(data.get("name")),
            value=_text(data.get("value"), "0"),
            change=_text(data.get("change")),
            change_type=change_type if change_type in {"positive", "negative"} else "positive",
        )


@dataclass(frozen=True)
class RecentOrder:
    id: str
    supplier: str
    item: str
    quantity: str
    status: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "supplier": self.supplier,
            "item": self.item,
            "quantity": self.quantity,
            "status": self.status,
            "date": self.date,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "RecentOrder":
        data = dict(payload or {})
        return RecentOrder(
            id=_text(data.get("id")),
            supplier=_text(data.get("supplier")),
            item=_text(data.get("item")),
            quantity=_text(data.get("quantity")),
            status=_text(data.get("status")),
            date=_text(data.get("date")).split("T", 1)[0],
        )


@dataclass(frozen=True)
class WorkOrderProgress:
    id: str
    item: str
    quantity: str
    progress: int
    due_date: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item,
            "quantity": self.quantity,
            "progress": self.progress,
            "dueDate": self.due_date,
            "status": self.status,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "WorkOrderProgress":
        data = dict(payload or {})
        return WorkOrderProgress(
            id=_text(data.get("id")),
            item=_text(data.get("item")),
            quantity=_text(data.get("quantity")),
            progress=max(0, min(100, _int(data.get("progress")))),
            due_date=_text(data.get("dueDate")),
            status=_text(data.get("status")),
        )


@dataclass
class WidgetResult:
    data: List[Any] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "data": [entry.to_dict() for entry in self.data],
            "error": self.error,
        }


@dataclass
class DashboardOverview:
    stats: WidgetResult
    recent_orders: WidgetResult
    work_orders: WidgetResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "recentOrders": self.recent_orders.to_dict(),
            "workOrders": self.work_orders.to_dict(),
        }
