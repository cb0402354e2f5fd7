from __future__ import annotations

import contextvars
import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict

from flask import g, has_request_context, request


_API_DURATION_BUCKETS_MS = (5.0, 10.0, 25.0, 50.0, 100.0, 250.0, 500.0, 1000.0, 2500.0, 5000.0, 10000.0)

_LOG_REQUEST_ID_CTX: contextvars.ContextVar[str] = contextvars.ContextVar("log_request_id", default="")


def _normalize_request_id(value: str | None) -> str:
    return str(value or "").strip() or "n/a"


def set_log_request_id(request_id: str | None) -> None:
    _LOG_REQUEST_ID_CTX.set(_normalize_request_id(request_id))


def _background_request_id(default: str | None = None) -> str:
    request_id = str(_LOG_REQUEST_ID_CTX.get() or "").strip()
    if request_id:
        return request_id
    return default or "n/a"


class JsonLogFormatter(logging.Formatter):
    _base_keys = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, object] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if has_request_context():
            payload["request_id"] = current_request_id(default="n/a")
            payload["path"] = request.path
            payload["method"] = request.method
        else:
            record_request_id = str(getattr(record, "request_id", "") or "").strip()
            payload["request_id"] = record_request_id or _background_request_id(default="n/a")

        for key, value in record.__dict__.items():
            if key in self._base_keys or key.startswith("_"):
                continue
            if key in payload:
                continue
            if callable(value):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def configure_json_logging(app) -> None:
    if not bool(app.config.get("LOG_JSON", True)):
        return
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).strip().upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)
    app.logger.handlers = []
    app.logger.propagate = True


def ensure_request_id() -> str:
    request_id = str(getattr(g, "request_id", "") or "").strip()
    if request_id:
        set_log_request_id(request_id)
        return request_id
    incoming = str(request.headers.get("X-Request-Id") or "").strip()
    request_id = incoming or str(uuid.uuid4())
    g.request_id = request_id
    set_log_request_id(request_id)
    return request_id


def current_request_id(default: str | None = None) -> str:
    if has_request_context():
        request_id = str(getattr(g, "request_id", "") or "").strip()
        if request_id:
            return request_id
    return _background_request_id(default=default)


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._api_calls_total: Dict[tuple[str, str, str], int] = {}
        self._api_call_duration_ms: Dict[tuple[str, str], dict] = {}
        self._api_transport_failures_total = 0
        self._session_cleared_total: Dict[str, int] = {}

    @staticmethod
    def _bucket_label(limit: float) -> str:
        return f"{limit:g}"

    @classmethod
    def _new_histogram_state(cls, limits: tuple[float, ...]) -> dict:
        return {
            "count": 0,
            "sum": 0.0,
            "buckets": {cls._bucket_label(limit): 0 for limit in limits} | {"+Inf": 0},
        }

    @classmethod
    def _observe_histogram(cls, state: dict, value: float, limits: tuple[float, ...]) -> None:
        duration = max(0.0, float(value))
        state["count"] += 1
        state["sum"] += duration
        for limit in limits:
            if duration <= limit:
                key = cls._bucket_label(limit)
                state["buckets"][key] = int(state["buckets"].get(key, 0)) + 1
        state["buckets"]["+Inf"] = int(state["count"])

    def observe_api_call(self, method: str, endpoint: str, status_code: int, duration_ms: float) -> None:
        method_key = str(method or "GET").strip().upper() or "GET"
        endpoint_key = str(endpoint or "unknown").strip() or "unknown"
        status_key = str(int(status_code))
        with self._lock:
            key = (method_key, endpoint_key, status_key)
            self._api_calls_total[key] = int(self._api_calls_total.get(key, 0)) + 1
            histogram = self._api_call_duration_ms.setdefault(
                (method_key, endpoint_key),
                self._new_histogram_state(_API_DURATION_BUCKETS_MS),
            )
            self._observe_histogram(histogram, duration_ms, _API_DURATION_BUCKETS_MS)

    def observe_api_transport_failure(self, count: int = 1) -> None:
        increment = max(0, int(count or 0))
        if increment <= 0:
            return
        with self._lock:
            self._api_transport_failures_total += increment

    def observe_session_cleared(self, reason: str) -> None:
        key = str(reason or "unknown").strip() or "unknown"
        with self._lock:
            self._session_cleared_total[key] = int(self._session_cleared_total.get(key, 0)) + 1

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "api_calls_total": {
                    f"{method} {endpoint} {status}": count
                    for (method, endpoint, status), count in sorted(self._api_calls_total.items())
                },
                "api_call_duration_ms": {
                    f"{method} {endpoint}": {
                        "count": int(state["count"]),
                        "sum": round(float(state["sum"]), 3),
                        "buckets": dict(state["buckets"]),
                    }
                    for (method, endpoint), state in sorted(self._api_call_duration_ms.items())
                },
                "api_transport_failures_total": int(self._api_transport_failures_total),
                "session_cleared_total": dict(sorted(self._session_cleared_total.items())),
            }

    def reset(self) -> None:
        with self._lock:
            self._api_calls_total.clear()
            self._api_call_duration_ms.clear()
            self._api_transport_failures_total = 0
            self._session_cleared_total.clear()


_METRICS = MetricsRegistry()


def observe_api_call(method: str, endpoint: str, status_code: int, duration_ms: float) -> None:
    _METRICS.observe_api_call(method, endpoint, status_code, duration_ms)


def observe_api_transport_failure(count: int = 1) -> None:
    _METRICS.observe_api_transport_failure(count)


def observe_session_cleared(reason: str) -> None:
    _METRICS.observe_session_cleared(reason)


def metrics_snapshot() -> dict:
    return _METRICS.snapshot()


def reset_metrics_for_tests() -> None:
    _METRICS.reset()
