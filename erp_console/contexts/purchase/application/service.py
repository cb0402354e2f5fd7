from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List

from erp_console.contexts.api.application.requester import AuthenticatedRequester
from erp_console.contexts.api.infrastructure.transport import ApiResponse, TransportError
from erp_console.contexts.purchase.domain.contracts import (
    PurchaseOrder,
    PurchaseOrderInput,
    validate_create_input,
)
from erp_console.contexts.purchase.infrastructure.mappers import (
    map_created_purchase_order,
    map_input_to_remote_payload,
    map_remote_purchase_order,
    map_updated_purchase_order,
)
from erp_console.errors import ApiRequestError, ValidationError, upstream_http_status
from erp_console.ui_strings import error_message


logger = logging.getLogger(__name__)

ORDERS_ENDPOINT = "/api/purchase/orders"


def _order_endpoint(order_id: str) -> str:
    return f"{ORDERS_ENDPOINT}/{urllib.parse.quote(str(order_id), safe='')}"


def _server_message(response: ApiResponse) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return str(payload.get("message") or "").strip() or None


def _unwrap(response: ApiResponse, key: str, message_key: str) -> Any:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ApiRequestError(
            code="api_invalid_response",
            message_key=message_key,
            status_code=response.status_code,
        ) from exc
    envelope = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(envelope, dict) or key not in envelope:
        raise ApiRequestError(
            code="api_invalid_response",
            message_key=message_key,
            status_code=response.status_code,
        )
    return envelope[key]


class PurchaseService:
    def __init__(self, requester: AuthenticatedRequester) -> None:
        self.requester = requester

    def create_purchase_order(self, order_input: PurchaseOrderInput) -> PurchaseOrder:
        errors = validate_create_input(order_input)
        if errors:
            raise ValidationError(details="; ".join(errors), payload={"fields": errors})

        response = self._request(
            ORDERS_ENDPOINT,
            "POST",
            map_input_to_remote_payload(order_input),
            message_key="order_create_failed",
            operation="create",
        )
        order = _unwrap(response, "order", "order_create_failed")
        return map_created_purchase_order(order, order_input)

    def get_purchase_orders(self) -> List[PurchaseOrder]:
        response = self._request(
            ORDERS_ENDPOINT,
            "GET",
            message_key="order_list_failed",
            operation="list",
            use_server_message=False,
        )
        orders = _unwrap(response, "orders", "order_list_failed")
        if not isinstance(orders, list):
            raise ApiRequestError(code="api_invalid_response", message_key="order_list_failed")
        return [map_remote_purchase_order(order) for order in orders if isinstance(order, dict)]

    def get_purchase_order(self, order_id: str) -> PurchaseOrder:
        response = self._request(
            _order_endpoint(order_id),
            "GET",
            message_key="order_not_found",
            operation="get",
            use_server_message=False,
        )
        return map_remote_purchase_order(_unwrap(response, "order", "order_not_found"))

    def update_purchase_order(self, order_id: str, order_input: PurchaseOrderInput) -> PurchaseOrder:
        response = self._request(
            _order_endpoint(order_id),
            "PUT",
            map_input_to_remote_payload(order_input),
            message_key="order_update_failed",
            operation="update",
        )
        order = _unwrap(response, "order", "order_update_failed")
        return map_updated_purchase_order(order, order_input)

    def delete_purchase_order(self, order_id: str) -> None:
        self._request(
            _order_endpoint(order_id),
            "DELETE",
            message_key="order_delete_failed",
            operation="delete",
        )

    def _request(
        self,
        endpoint: str,
        method: str,
        payload: Dict[str, Any] | None = None,
        *,
        message_key: str,
        operation: str,
        use_server_message: bool = True,
    ) -> ApiResponse:
        try:
            response = self.requester.request(endpoint, method, json_body=payload)
        except TransportError as exc:
            logger.error(
                "purchase_order_request_failed",
                extra={"operation": operation, "details": str(exc)},
            )
            raise ApiRequestError(message_key="api_unavailable", details=error_message("api_unavailable")) from exc

        if response.ok:
            return response

        details = _server_message(response) if use_server_message else None
        error = ApiRequestError(
            code=f"purchase_order_{operation}_failed",
            message_key=message_key,
            http_status=upstream_http_status(response.status_code),
            details=details or error_message(message_key),
            status_code=response.status_code,
        )
        logger.error(
            "purchase_order_request_failed",
            extra={"operation": operation, "status_code": response.status_code, "details": error.details},
        )
        raise error
