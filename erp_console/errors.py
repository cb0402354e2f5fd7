from __future__ import annotations

from typing import Any, Dict

from erp_console.ui_strings import error_message


class AppError(Exception):
    default_code = "system_error"
    default_message_key = "unexpected_error"
    default_http_status = 500
    default_critical = True

    def __init__(
        self,
        code: str | None = None,
        message_key: str | None = None,
        http_status: int | None = None,
        critical: bool | None = None,
        details: str | None = None,
        payload: Dict[str, Any] | None = None,
    ) -> None:
        self.code = (code or self.default_code).strip()
        self.message_key = (message_key or self.default_message_key).strip()
        self.http_status = int(http_status or self.default_http_status)
        self.critical = bool(self.default_critical if critical is None else critical)
        self.details = (details or "").strip() or None
        self.payload = dict(payload or {})
        super().__init__(self.details or self.code)

    def user_message(self) -> str:
        fallback = error_message("unexpected_error")
        return error_message(self.message_key, fallback)

    def to_response_payload(self, request_id: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.code,
            "message": self.user_message(),
            "request_id": request_id,
        }
        if self.payload:
            payload.update(self.payload)
        return payload


class UserActionError(AppError):
    default_code = "action_invalid"
    default_message_key = "action_invalid"
    default_http_status = 400
    default_critical = False


class ValidationError(UserActionError):
    default_code = "validation_error"
    default_message_key = "validation_error"
    default_http_status = 400
    default_critical = False


class PermissionError(UserActionError):
    default_code = "permission_denied"
    default_message_key = "permission_denied"
    default_http_status = 403
    default_critical = False


class IntegrationError(AppError):
    default_code = "integration_error"
    default_message_key = "api_unavailable"
    default_http_status = 502
    default_critical = False


class ApiRequestError(IntegrationError):
    """Failure reported by the remote ERP API (or reaching it).

    ``details`` carries the server-supplied message when there is one, so
    ``user_message()`` prefers it over the generic localized text.
    """

    default_code = "api_request_failed"

    def __init__(self, *args: Any, status_code: int | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.status_code = status_code

    def user_message(self) -> str:
        if self.details:
            return self.details
        return super().user_message()

    def to_response_payload(self, request_id: str) -> Dict[str, Any]:
        payload = super().to_response_payload(request_id)
        if self.status_code is not None:
            payload.setdefault("upstream_status", self.status_code)
        return payload


class SystemError(AppError):
    default_code = "system_error"
    default_message_key = "unexpected_error"
    default_http_status = 500
    default_critical = True


def upstream_http_status(status_code: int | None) -> int:
    if status_code in {400, 401, 403, 404, 409, 422}:
        return int(status_code)
    return 502
