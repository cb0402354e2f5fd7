from __future__ import annotations

import unittest

from erp_console.contexts.api.application.requester import AuthenticatedRequester
from erp_console.contexts.auth.domain.contracts import User
from erp_console.contexts.auth.infrastructure.session_store import SessionStore
from erp_console.contexts.purchase.application.service import PurchaseService
from erp_console.contexts.purchase.domain.contracts import PurchaseOrderInput, PurchaseOrderItem
from erp_console.errors import ApiRequestError, ValidationError
from erp_console.ui_strings import error_message
from tests.helpers.fake_transport import FakeTransport, user_payload


def _valid_input() -> PurchaseOrderInput:
    return PurchaseOrderInput(
        supplier="Hanil Steel",
        supplier_id="sup-1",
        order_date="2024-03-01",
        expected_date="2024-03-15",
        items=[PurchaseOrderItem(item_name="Bolt", quantity=10, unit_price=500, total_price=5000)],
    )


class PurchaseServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.transport = FakeTransport()
        store = SessionStore()
        store.login("t-1", User.from_dict(user_payload()))
        self.service = PurchaseService(AuthenticatedRequester("http://api:8080", store, self.transport))

    def test_list_maps_orders(self) -> None:
        self.transport.queue(
            200,
            {
                "status": "success",
                "data": {
                    "orders": [
                        {"_id": "po-1", "orderNumber": "PO-1", "status": "SENT", "orderDate": "2024-03-01"},
                        {"_id": "po-2", "orderNumber": "PO-2", "status": "RECEIVED", "orderDate": "2024-03-02"},
                    ]
                },
            },
        )

        orders = self.service.get_purchase_orders()

        self.assertEqual([order.status for order in orders], ["PENDING", "RECEIVED"])
        self.assertEqual(self.transport.last.url, "http://api:8080/api/purchase/orders")
        self.assertEqual(self.transport.last.headers.get("Authorization"), "Bearer t-1")

    def test_list_failure_uses_localized_message(self) -> None:
        self.transport.queue(500, {"message": "database down"})

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.get_purchase_orders()

        self.assertEqual(ctx.exception.user_message(), error_message("order_list_failed"))
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.http_status, 502)

    def test_get_not_found(self) -> None:
        self.transport.queue(404, {"message": "Purchase order not found"})

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.get_purchase_order("missing id")

        self.assertEqual(ctx.exception.user_message(), error_message("order_not_found"))
        self.assertEqual(ctx.exception.http_status, 404)
        self.assertEqual(self.transport.last.url, "http://api:8080/api/purchase/orders/missing%20id")

    def test_create_posts_remote_shape(self) -> None:
        self.transport.queue(201, {"status": "success", "data": {"order": {"_id": "po-9", "orderNumber": "PO-9"}}})

        order = self.service.create_purchase_order(_valid_input())

        self.assertEqual(order.id, "po-9")
        self.assertEqual(order.status, "PENDING")
        sent = self.transport.last
        self.assertEqual(sent.method, "POST")
        self.assertEqual(sent.json()["expectedDeliveryDate"], "2024-03-15")
        self.assertEqual(sent.json()["items"][0]["itemId"], "507f1f77bcf86cd799439011")

    def test_create_without_expected_date_uses_order_date(self) -> None:
        self.transport.queue(201, {"status": "success", "data": {"order": {"_id": "po-10"}}})
        order_input = _valid_input()
        order_input.expected_date = None

        order = self.service.create_purchase_order(order_input)

        self.assertEqual(order.expected_date, "2024-03-01")
        self.assertNotIn("expectedDeliveryDate", self.transport.last.json())

    def test_create_rejects_invalid_input_without_request(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_purchase_order(PurchaseOrderInput(supplier="only supplier"))
        self.assertEqual(self.transport.requests, [])

    def test_create_surfaces_server_message(self) -> None:
        self.transport.queue(400, {"status": "error", "message": "Supplier not found"})

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.create_purchase_order(_valid_input())

        self.assertEqual(ctx.exception.user_message(), "Supplier not found")
        self.assertEqual(ctx.exception.http_status, 400)

    def test_update_and_delete(self) -> None:
        self.transport.queue(
            200,
            {"status": "success", "data": {"order": {"_id": "po-1", "status": "CONFIRMED", "orderDate": "2024-03-01"}}},
        )
        self.transport.queue(200, {"status": "success"})

        updated = self.service.update_purchase_order("po-1", PurchaseOrderInput(supplier="Renamed"))
        self.assertEqual(updated.supplier, "Renamed")
        self.assertEqual(updated.status, "APPROVED")
        self.assertEqual(self.transport.last.method, "PUT")

        self.service.delete_purchase_order("po-1")
        self.assertEqual(self.transport.last.method, "DELETE")
        self.assertEqual(self.transport.last.url, "http://api:8080/api/purchase/orders/po-1")

    def test_delete_failure_without_message_uses_fallback(self) -> None:
        self.transport.queue(500, raw=b"")

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.delete_purchase_order("po-1")

        self.assertEqual(ctx.exception.user_message(), error_message("order_delete_failed"))

    def test_network_failure_is_integration_error(self) -> None:
        self.transport.fail()

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.get_purchase_orders()

        self.assertEqual(ctx.exception.message_key, "api_unavailable")
        self.assertEqual(ctx.exception.http_status, 502)

    def test_malformed_envelope_is_rejected(self) -> None:
        self.transport.queue(200, {"status": "success", "orders": []})

        with self.assertRaises(ApiRequestError) as ctx:
            self.service.get_purchase_orders()

        self.assertEqual(ctx.exception.code, "api_invalid_response")


if __name__ == "__main__":
    unittest.main()
