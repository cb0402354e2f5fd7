import unittest

from erp_console import create_app
from erp_console.config import Config
from erp_console.ui_strings import error_message
from tests.helpers.fake_transport import FakeTransport, auth_success_payload, user_payload


def _build_temp_app(transport: FakeTransport, **overrides):
    attrs = {
        "TESTING": True,
        "LOG_JSON": False,
        "SESSION_STORAGE_BACKEND": "memory",
        "ERP_API_URL": "http://api:8080",
    }
    attrs.update(overrides)
    temp_config = type("TempConfig", (Config,), attrs)
    return create_app(temp_config, transport=transport)


class ConsoleRoutesTestBase(unittest.TestCase):
    def setUp(self) -> None:
        self.transport = FakeTransport()
        self.app = _build_temp_app(self.transport)
        self.client = self.app.test_client()

    def _login(self, role: str = "MANAGER") -> None:
        self.transport.queue(200, auth_success_payload("t-1", role=role))
        response = self.client.post("/auth/login", json={"email": "minjun@example.com", "password": "secret"})
        self.assertEqual(response.status_code, 200)

    def _queue_me(self, role: str = "MANAGER") -> None:
        self.transport.queue(200, {"status": "success", "data": {"user": user_payload(role=role)}})


class AuthRoutesTest(ConsoleRoutesTestBase):
    def test_login_success_returns_api_body(self) -> None:
        self.transport.queue(200, auth_success_payload("t-1"))

        response = self.client.post("/auth/login", json={"email": "MinJun@Example.com ", "password": "secret"})

        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertEqual(payload["status"], "success")
        self.assertEqual(payload["data"]["user"]["email"], "minjun@example.com")
        self.assertEqual(self.transport.last.json()["email"], "minjun@example.com")
        self.assertTrue(response.headers.get("X-Request-Id"))

    def test_login_rejected_is_401(self) -> None:
        self.transport.queue(401, {"status": "error", "message": "Invalid credentials"})

        response = self.client.post("/auth/login", json={"email": "a@b.c", "password": "x"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["message"], "Invalid credentials")

    def test_login_missing_fields_is_validation_error(self) -> None:
        response = self.client.post("/auth/login", json={"email": "a@b.c"})

        self.assertEqual(response.status_code, 400)
        payload = response.get_json()
        self.assertEqual(payload["error"], "auth_missing_credentials")
        self.assertEqual(payload["message"], error_message("validation_error"))
        self.assertEqual(self.transport.requests, [])

    def test_session_payload_never_exposes_token(self) -> None:
        self._login()

        payload = self.client.get("/auth/session").get_json()

        self.assertTrue(payload["isAuthenticated"])
        self.assertNotIn("token", payload)
        self.assertEqual(payload["user"]["role"], "MANAGER")

    def test_logout_redirects_to_signin(self) -> None:
        self._login()
        self.transport.queue(200, {"status": "success"})

        response = self.client.post("/auth/logout")

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers["Location"].endswith("/auth/signin"))
        self.assertFalse(self.client.get("/auth/session").get_json()["isAuthenticated"])

    def test_me_requires_session(self) -> None:
        response = self.client.get("/auth/me")

        self.assertEqual(response.status_code, 401)
        payload = response.get_json()
        self.assertEqual(payload["error"], "auth_required")
        self.assertEqual(payload["message"], error_message("auth_required"))
        self.assertTrue(payload["request_id"])

    def test_me_expired_token_clears_session(self) -> None:
        self._login()
        self.transport.queue(401, {"message": "jwt expired"})

        response = self.client.get("/auth/me")

        self.assertEqual(response.status_code, 401)
        self.assertFalse(self.client.get("/auth/session").get_json()["isAuthenticated"])

    def test_update_profile_with_refresh(self) -> None:
        self._login()
        self._queue_me()
        self.transport.queue(200, {"status": "success", "data": {"user": {"_id": "u1", "email": "minjun@example.com", "name": "New"}}})
        self.transport.queue(200, {"status": "success", "data": {"user": {"_id": "u1", "email": "minjun@example.com", "name": "New"}}})

        response = self.client.patch("/auth/me?refresh=true", json={"name": "New"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/auth/session").get_json()["user"]["name"], "New")


class PurchaseRoutesTest(ConsoleRoutesTestBase):
    def test_orders_require_session(self) -> None:
        response = self.client.get("/purchase/orders")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.transport.requests, [])

    def test_list_orders_with_status_filter_and_labels(self) -> None:
        self._login()
        self._queue_me()
        self.transport.queue(
            200,
            {
                "status": "success",
                "data": {
                    "orders": [
                        {"_id": "po-1", "status": "CONFIRMED", "orderDate": "2024-03-01"},
                        {"_id": "po-2", "status": "DRAFT", "orderDate": "2024-03-02"},
                    ]
                },
            },
        )

        response = self.client.get("/purchase/orders?status=approved")

        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertEqual(payload["total"], 1)
        self.assertEqual(payload["items"][0]["id"], "po-1")
        self.assertEqual(payload["items"][0]["statusLabel"], "승인완료")

    def test_create_order_validation_error(self) -> None:
        self._login()
        self._queue_me()

        response = self.client.post("/purchase/orders", json={"supplier": "S"})

        self.assertEqual(response.status_code, 400)
        payload = response.get_json()
        self.assertEqual(payload["error"], "validation_error")
        self.assertIn("items must be a non-empty list", payload["fields"])

    def test_upstream_failure_is_reported_with_status(self) -> None:
        self._login()
        self._queue_me()
        self.transport.queue(404, {"message": "not found"})

        response = self.client.get("/purchase/orders/po-404")

        self.assertEqual(response.status_code, 404)
        payload = response.get_json()
        self.assertEqual(payload["message"], error_message("order_not_found"))
        self.assertEqual(payload["upstream_status"], 404)

    def test_delete_needs_manager_role(self) -> None:
        self._login(role="USER")
        self._queue_me(role="USER")

        response = self.client.delete("/purchase/orders/po-1")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()["error"], "permission_denied")

    def test_manager_can_delete(self) -> None:
        self._login(role="MANAGER")
        self._queue_me(role="MANAGER")
        self.transport.queue(200, {"status": "success"})

        response = self.client.delete("/purchase/orders/po-1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.transport.last.method, "DELETE")

    def test_session_rejected_by_server_is_logged_out(self) -> None:
        self._login(role="ADMIN")
        self.transport.queue(401, {"message": "jwt expired"})

        response = self.client.delete("/purchase/orders/po-1")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["error"], "auth_required")
        self.assertEqual(self.transport.last.url, "http://api:8080/api/auth/me")
        self.assertFalse(self.client.get("/auth/session").get_json()["isAuthenticated"])

    def test_unreachable_server_logs_session_out(self) -> None:
        self._login()
        self.transport.fail().fail()

        response = self.client.get("/purchase/orders")

        self.assertEqual(response.status_code, 401)
        self.assertEqual([request.url for request in self.transport.requests[-2:]], [
            "http://api:8080/api/auth/me",
            "http://api:8080/api/auth/logout",
        ])
        self.assertFalse(self.client.get("/auth/session").get_json()["isAuthenticated"])

    def test_role_is_checked_against_the_server_user(self) -> None:
        self._login(role="MANAGER")
        self._queue_me(role="USER")

        response = self.client.delete("/purchase/orders/po-1")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get("/auth/session").get_json()["user"]["role"], "USER")


class DashboardRoutesTest(ConsoleRoutesTestBase):
    def test_dashboard_returns_partial_overview(self) -> None:
        self._login()
        self._queue_me()
        self.transport.queue(200, {"success": True, "data": [{"name": "총 구매주문", "value": "3", "change": "+1"}]})
        self.transport.queue(500, {"success": False, "message": "boom"})
        self.transport.queue(200, {"success": True, "data": []})

        response = self.client.get("/dashboard")

        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertTrue(payload["stats"]["ok"])
        self.assertFalse(payload["recentOrders"]["ok"])
        self.assertEqual(payload["recentOrders"]["error"], "boom")
        self.assertTrue(payload["workOrders"]["ok"])
        self.assertEqual(payload["user"]["email"], "minjun@example.com")


class HealthRouteTest(ConsoleRoutesTestBase):
    def test_health_reports_metrics(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertEqual(payload["status"], "ok")
        self.assertEqual(payload["api_url"], "http://api:8080")
        self.assertIn("api_calls_total", payload["metrics"])

    def test_ui_strings_bundle(self) -> None:
        payload = self.client.get("/ui-strings").get_json()
        self.assertEqual(payload["messages"]["error"]["network_error"], "Network error occurred")


if __name__ == "__main__":
    unittest.main()
