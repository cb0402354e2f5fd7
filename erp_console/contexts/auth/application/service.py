from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping

from erp_console.config import DEFAULT_SIGNIN_PATH
from erp_console.contexts.api.application.requester import (
    AuthenticatedRequester,
    bearer_headers,
    encode_body,
    resolve_url,
)
from erp_console.contexts.api.infrastructure.transport import ApiResponse, TransportError
from erp_console.contexts.auth.domain.contracts import (
    AuthResponse,
    ProfileUpdateInput,
    RegisterInput,
    User,
    role_rank,
)
from erp_console.contexts.auth.infrastructure.session_store import SessionStore
from erp_console.observability import observe_session_cleared
from erp_console.ui_strings import error_message


logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]


def _network_error_response() -> AuthResponse:
    return AuthResponse(status="error", message=error_message("network_error"))


class AuthClient:
    def __init__(
        self,
        requester: AuthenticatedRequester,
        *,
        signin_path: str = DEFAULT_SIGNIN_PATH,
        navigator: Navigator | None = None,
    ) -> None:
        self.requester = requester
        self.signin_path = signin_path
        self.navigator = navigator

    @property
    def session_store(self) -> SessionStore:
        return self.requester.session_store

    def auth_headers(self) -> Dict[str, str]:
        return bearer_headers(self.session_store.token)

    def login(self, email: str, password: str) -> AuthResponse:
        return self._authenticate("/api/auth/login", {"email": email, "password": password}, action="login")

    def register(self, user_input: RegisterInput) -> AuthResponse:
        return self._authenticate("/api/auth/register", user_input.to_payload(), action="register")

    def get_current_user(self) -> User | None:
        token = self.session_store.token
        if not token:
            return None

        try:
            response = self._call("GET", "/api/auth/me", token=token)
        except TransportError:
            logger.exception("auth_current_user_failed")
            return None

        if not response.ok:
            if response.status_code == 401:
                self._clear_session("unauthorized")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.exception("auth_current_user_invalid_body", extra={"status_code": response.status_code})
            return None

        user = _user_from_me_payload(payload)
        if user is not None:
            self.session_store.set_user(user)
        return user

    def update_profile(self, updates: ProfileUpdateInput | Mapping[str, Any]) -> AuthResponse:
        """Send the profile changes; the session's user is left as it was.

        Callers refresh it with ``get_current_user()`` when they need the
        server's version.
        """
        payload = updates.to_payload() if isinstance(updates, ProfileUpdateInput) else dict(updates)
        try:
            response = self._call("PATCH", "/api/auth/me", payload, token=self.session_store.token)
            return AuthResponse.from_payload(response.json())
        except (TransportError, ValueError):
            logger.exception("auth_update_profile_failed")
            return _network_error_response()

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> AuthResponse:
        payload = {
            "passwordCurrent": current_password,
            "password": new_password,
            "passwordConfirm": confirm_password,
        }
        try:
            response = self._call("PATCH", "/api/auth/change-password", payload, token=self.session_store.token)
            result = AuthResponse.from_payload(response.json())
        except (TransportError, ValueError):
            logger.exception("auth_change_password_failed")
            return _network_error_response()

        if response.ok and result.token:
            user = result.user or self.session_store.user
            if user is not None:
                self.session_store.login(result.token, user)
        return result

    def logout(self) -> str:
        token = self.session_store.token
        try:
            if token:
                response = self._call("POST", "/api/auth/logout", token=token)
                if not response.ok:
                    logger.warning("auth_logout_rejected", extra={"status_code": response.status_code})
        except TransportError:
            logger.exception("auth_logout_failed")
        finally:
            self._clear_session("logout")
            if self.navigator is not None:
                self.navigator(self.signin_path)
        return self.signin_path

    def is_authenticated(self) -> bool:
        return self.session_store.is_authenticated

    def has_role(self, required_role: str) -> bool:
        user = self.session_store.user
        if user is None:
            return False
        return role_rank(user.role) >= role_rank(required_role)

    def _authenticate(self, path: str, payload: Dict[str, Any], *, action: str) -> AuthResponse:
        store = self.session_store
        store.set_loading(True)
        try:
            response = self._call("POST", path, payload)
            result = AuthResponse.from_payload(response.json())
        except (TransportError, ValueError):
            logger.exception(f"auth_{action}_failed")
            self._clear_session(f"{action}_error")
            return _network_error_response()
        else:
            if response.ok and result.token and result.user is not None:
                store.login(result.token, result.user)
            else:
                logger.info(f"auth_{action}_rejected", extra={"status_code": response.status_code})
                self._clear_session(f"{action}_rejected")
            return result
        finally:
            store.set_loading(False)

    def _call(
        self,
        method: str,
        path: str,
        payload: Dict[str, Any] | None = None,
        *,
        token: str | None = None,
    ) -> ApiResponse:
        headers = {"Content-Type": "application/json"}
        headers.update(bearer_headers(token))
        url = resolve_url(self.requester.base_url, path)
        return self.requester.send(method, url, headers, encode_body(payload))

    def _clear_session(self, reason: str) -> None:
        self.session_store.clear_auth()
        observe_session_cleared(reason)


def _user_from_me_payload(payload: object) -> User | None:
    if not isinstance(payload, dict):
        return None
    envelope = payload.get("data")
    if isinstance(envelope, dict):
        user = User.from_dict(envelope.get("user"))
        if user is not None:
            return user
    return User.from_dict(payload)
