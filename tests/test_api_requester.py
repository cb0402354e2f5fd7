from __future__ import annotations

import unittest
import urllib.error
from unittest.mock import patch

from erp_console.contexts.api.application.requester import (
    AuthenticatedRequester,
    merge_headers,
    resolve_url,
)
from erp_console.contexts.api.infrastructure.transport import ApiResponse, TransportError, UrllibTransport
from erp_console.contexts.auth.domain.contracts import User
from erp_console.contexts.auth.infrastructure.session_store import SessionStore
from erp_console.observability import metrics_snapshot, observe_api_call, reset_metrics_for_tests
from erp_console.ui_strings import operator_message
from tests.helpers.fake_transport import FakeTransport, user_payload


class ResolveUrlTest(unittest.TestCase):
    def test_relative_endpoint_joins_with_single_slash(self) -> None:
        self.assertEqual(resolve_url("http://api:8080/", "/api/x"), "http://api:8080/api/x")
        self.assertEqual(resolve_url("http://api:8080", "api/x"), "http://api:8080/api/x")

    def test_absolute_endpoint_is_used_verbatim(self) -> None:
        self.assertEqual(resolve_url("http://api:8080", "https://other/y"), "https://other/y")

    def test_merge_headers_later_layer_wins_case_insensitively(self) -> None:
        merged = merge_headers({"Content-Type": "application/json"}, {"content-type": "text/plain"})
        self.assertEqual(merged, {"content-type": "text/plain"})


class AuthenticatedRequesterTest(unittest.TestCase):
    def setUp(self) -> None:
        reset_metrics_for_tests()
        self.transport = FakeTransport()
        self.store = SessionStore()
        self.requester = AuthenticatedRequester("http://api:8080", self.store, self.transport)

    def _login(self) -> None:
        self.store.login("t-1", User.from_dict(user_payload()))

    def test_anonymous_request_has_no_authorization(self) -> None:
        self.transport.queue(200, {"ok": True})
        self.requester.request("/api/x")

        sent = self.transport.last
        self.assertEqual(sent.method, "GET")
        self.assertEqual(sent.url, "http://api:8080/api/x")
        self.assertEqual(sent.headers.get("Content-Type"), "application/json")
        self.assertNotIn("Authorization", sent.headers)

    def test_bearer_token_is_attached_when_logged_in(self) -> None:
        self._login()
        self.transport.queue(200, {})
        self.requester.request("/api/x", "POST", json_body={"a": 1})

        sent = self.transport.last
        self.assertEqual(sent.headers.get("Authorization"), "Bearer t-1")
        self.assertEqual(sent.json(), {"a": 1})

    def test_caller_headers_override_defaults(self) -> None:
        self._login()
        self.transport.queue(200, {})
        self.requester.request("/api/x", headers={"Authorization": "Bearer other", "Content-Type": "text/csv"})

        sent = self.transport.last
        self.assertEqual(sent.headers.get("Authorization"), "Bearer other")
        self.assertEqual(sent.headers.get("Content-Type"), "text/csv")

    def test_non_success_response_is_returned_untouched(self) -> None:
        self._login()
        self.transport.queue(401, {"message": "expired"})
        response = self.requester.request("/api/x")

        self.assertIsInstance(response, ApiResponse)
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.ok)
        self.assertTrue(self.store.is_authenticated)

    def test_transport_failure_propagates_and_is_counted(self) -> None:
        self.transport.fail()
        with self.assertRaises(TransportError):
            self.requester.request("/api/x")
        self.assertEqual(metrics_snapshot()["api_transport_failures_total"], 1)

    def test_calls_are_recorded_per_endpoint_path(self) -> None:
        self.transport.queue(200, {}).queue(404, {})
        self.requester.request("/api/x")
        self.requester.request("/api/x")

        snapshot = metrics_snapshot()
        self.assertEqual(snapshot["api_calls_total"].get("GET /api/x 200"), 1)
        self.assertEqual(snapshot["api_calls_total"].get("GET /api/x 404"), 1)


class UrllibTransportTest(unittest.TestCase):
    def test_connection_failure_is_transport_error(self) -> None:
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("connection refused")):
            with self.assertRaises(TransportError) as ctx:
                UrllibTransport().send("GET", "http://api:8080/api/x", {})
        self.assertEqual(
            str(ctx.exception),
            operator_message("api_connection_failed", reason="connection refused"),
        )


class ApiCallHistogramTest(unittest.TestCase):
    def setUp(self) -> None:
        reset_metrics_for_tests()

    def test_duration_buckets_are_reported(self) -> None:
        observe_api_call("GET", "/api/x", 200, 30.0)
        observe_api_call("GET", "/api/x", 500, 3000.0)

        histogram = metrics_snapshot()["api_call_duration_ms"]["GET /api/x"]
        self.assertEqual(histogram["count"], 2)
        self.assertEqual(histogram["sum"], 3030.0)
        self.assertEqual(histogram["buckets"]["25"], 0)
        self.assertEqual(histogram["buckets"]["50"], 1)
        self.assertEqual(histogram["buckets"]["2500"], 1)
        self.assertEqual(histogram["buckets"]["5000"], 2)
        self.assertEqual(histogram["buckets"]["+Inf"], 2)


if __name__ == "__main__":
    unittest.main()
