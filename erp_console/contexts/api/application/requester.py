from __future__ import annotations

import json
import logging
import time
import urllib.parse
from typing import Any, Dict, Mapping

from erp_console.contexts.api.infrastructure.transport import ApiResponse, Transport, TransportError, UrllibTransport
from erp_console.contexts.auth.infrastructure.session_store import SessionStore
from erp_console.observability import observe_api_call, observe_api_transport_failure


logger = logging.getLogger(__name__)


def is_absolute_url(endpoint: str) -> bool:
    return endpoint.startswith("http://") or endpoint.startswith("https://")


def resolve_url(base_url: str, endpoint: str) -> str:
    if is_absolute_url(endpoint):
        return endpoint
    base = base_url.rstrip("/")
    if not endpoint:
        return base
    return f"{base}/{endpoint.lstrip('/')}"


def encode_body(json_body: Any, body: bytes | str | None = None) -> bytes | None:
    if json_body is not None:
        return json.dumps(json_body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


def bearer_headers(token: str | None) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def merge_headers(*layers: Mapping[str, str] | None) -> Dict[str, str]:
    """Later layers win; header names compare case-insensitively."""
    merged: Dict[str, str] = {}
    names: Dict[str, str] = {}
    for layer in layers:
        for name, value in (layer or {}).items():
            lowered = name.lower()
            previous = names.get(lowered)
            if previous is not None and previous != name:
                merged.pop(previous, None)
            names[lowered] = name
            merged[name] = value
    return merged


class AuthenticatedRequester:
    """Issues API calls carrying the session's bearer token.

    The response is returned as-is: status interpretation, 401 handling and
    retries belong to the caller.
    """

    def __init__(self, base_url: str, session_store: SessionStore, transport: Transport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session_store = session_store
        self.transport = transport or UrllibTransport()

    def auth_headers(self) -> Dict[str, str]:
        return bearer_headers(self.session_store.token)

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        body: bytes | str | None = None,
    ) -> ApiResponse:
        url = resolve_url(self.base_url, endpoint)
        final_headers = merge_headers(
            {"Content-Type": "application/json"},
            self.auth_headers(),
            headers,
        )
        return self.send(method, url, final_headers, encode_body(json_body, body))

    def send(self, method: str, url: str, headers: Mapping[str, str], data: bytes | None = None) -> ApiResponse:
        method_key = method.upper()
        metric_endpoint = urllib.parse.urlsplit(url).path or "/"
        started = time.perf_counter()
        try:
            response = self.transport.send(method_key, url, headers, data)
        except TransportError:
            observe_api_transport_failure()
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        observe_api_call(method_key, metric_endpoint, response.status_code, elapsed_ms)
        logger.debug(
            "api_call",
            extra={
                "http_method": method_key,
                "endpoint": metric_endpoint,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
