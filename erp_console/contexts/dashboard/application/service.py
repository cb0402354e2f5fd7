from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, TypeVar

from erp_console.contexts.api.application.requester import AuthenticatedRequester
from erp_console.contexts.api.infrastructure.transport import TransportError
from erp_console.contexts.dashboard.domain.contracts import (
    DashboardOverview,
    DashboardStat,
    RecentOrder,
    WidgetResult,
    WorkOrderProgress,
)
from erp_console.errors import ApiRequestError, upstream_http_status
from erp_console.ui_strings import error_message


logger = logging.getLogger(__name__)

T = TypeVar("T")


class DashboardService:
    def __init__(self, requester: AuthenticatedRequester) -> None:
        self.requester = requester

    def get_stats(self) -> List[DashboardStat]:
        rows = self._fetch("/api/dashboard/stats", "dashboard_stats_failed")
        return [DashboardStat.from_dict(row) for row in rows]

    def get_recent_orders(self) -> List[RecentOrder]:
        rows = self._fetch("/api/dashboard/recent-orders", "dashboard_recent_orders_failed")
        return [RecentOrder.from_dict(row) for row in rows]

    def get_work_orders(self) -> List[WorkOrderProgress]:
        rows = self._fetch("/api/dashboard/work-orders", "dashboard_work_orders_failed")
        return [WorkOrderProgress.from_dict(row) for row in rows]

    def load_overview(self) -> DashboardOverview:
        # Widgets load independently: one failure leaves the others intact.
        return DashboardOverview(
            stats=self._widget(self.get_stats),
            recent_orders=self._widget(self.get_recent_orders),
            work_orders=self._widget(self.get_work_orders),
        )

    @staticmethod
    def _widget(loader: Callable[[], List[T]]) -> WidgetResult:
        try:
            return WidgetResult(data=list(loader()))
        except ApiRequestError as exc:
            return WidgetResult(error=exc.user_message())

    def _fetch(self, endpoint: str, message_key: str) -> List[Dict[str, Any]]:
        try:
            response = self.requester.request(endpoint)
        except TransportError as exc:
            logger.error("dashboard_request_failed", extra={"endpoint": endpoint, "details": str(exc)})
            raise ApiRequestError(message_key=message_key, details=error_message(message_key)) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        body = payload if isinstance(payload, dict) else {}
        if not response.ok or body.get("success") is False:
            details = str(body.get("message") or "").strip() or error_message(message_key)
            logger.warning(
                "dashboard_request_failed",
                extra={"endpoint": endpoint, "status_code": response.status_code, "details": details},
            )
            raise ApiRequestError(
                code="dashboard_request_failed",
                message_key=message_key,
                http_status=upstream_http_status(response.status_code) if not response.ok else 502,
                details=details,
                status_code=response.status_code,
            )

        rows = body.get("data")
        if not isinstance(rows, list):
            raise ApiRequestError(
                code="api_invalid_response",
                message_key=message_key,
                status_code=response.status_code,
            )
        return [row for row in rows if isinstance(row, dict)]
