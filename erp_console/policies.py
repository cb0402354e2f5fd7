from __future__ import annotations

from functools import wraps
from typing import Callable, Set, TypeVar

from erp_console.context import current_context
from erp_console.contexts.auth.domain.contracts import ROLE_HIERARCHY, ROLE_USER
from erp_console.errors import PermissionError as AppPermissionError


VALID_ROLES: Set[str] = set(ROLE_HIERARCHY)

F = TypeVar("F", bound=Callable)


def normalize_role(role: str | None, default: str = ROLE_USER) -> str:
    normalized = str(role or "").strip().upper()
    if normalized in VALID_ROLES:
        return normalized
    return default if default in VALID_ROLES else ""


def _auth_required() -> AppPermissionError:
    return AppPermissionError(
        code="auth_required",
        message_key="auth_required",
        http_status=401,
        critical=False,
    )


def require_session(role: str | None = None, *, verify: bool = True) -> Callable[[F], F]:
    """Reject the request unless a session is active (and ranks at least ``role``).

    With ``verify`` the session is confirmed against ``/api/auth/me`` first;
    a session the server no longer accepts is logged out and rejected with 401.
    The role is checked against the user the server returned.
    """

    def decorator(view: F) -> F:
        @wraps(view)
        def wrapper(*args, **kwargs):
            auth_client = current_context().auth_client
            if not auth_client.is_authenticated():
                raise _auth_required()
            if verify and auth_client.get_current_user() is None:
                auth_client.logout()
                raise _auth_required()
            if role and not auth_client.has_role(role):
                raise AppPermissionError(
                    code="permission_denied",
                    message_key="permission_denied",
                    http_status=403,
                    critical=False,
                )
            return view(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
