from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Dict, List

from erp_console.contexts.auth.domain.contracts import Session, User
from erp_console.contexts.auth.infrastructure.storage import MemorySessionStorage, SessionStorage


logger = logging.getLogger(__name__)

STORAGE_VERSION = 0

SessionListener = Callable[[Session], None]


class SessionStore:
    """Process-wide holder of the current token and user.

    Every mutation is applied under the lock, persisted under ``storage_key``
    and then broadcast to subscribers outside the lock. ``is_authenticated``
    is never stored: it is derived from token and user, so a session with
    only one of them set cannot be observed.
    """

    def __init__(
        self,
        storage: SessionStorage | None = None,
        *,
        storage_key: str = "auth-storage",
    ) -> None:
        self._lock = Lock()
        self._storage = storage or MemorySessionStorage()
        self._storage_key = storage_key
        self._listeners: List[SessionListener] = []
        self._session = self._rehydrate()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def snapshot(self) -> Session:
        with self._lock:
            return self._session

    @property
    def token(self) -> str | None:
        return self.snapshot().token

    @property
    def user(self) -> User | None:
        return self.snapshot().user

    @property
    def is_authenticated(self) -> bool:
        return self.snapshot().is_authenticated

    @property
    def is_loading(self) -> bool:
        return self.snapshot().is_loading

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def set_loading(self, loading: bool) -> None:
        self._apply(lambda current: Session(current.token, current.user, bool(loading)), persist=False)

    def login(self, token: str | None, user: User | None) -> None:
        token_value = str(token or "").strip() or None
        if token_value is None or user is None:
            logger.warning("session_login_incomplete", extra={"has_token": bool(token_value), "has_user": user is not None})
            self.clear_auth()
            return
        self._apply(lambda current: Session(token_value, user, current.is_loading))

    def set_user(self, user: User | None) -> None:
        self._apply(lambda current: Session(current.token, user, current.is_loading))

    def logout(self) -> None:
        self._apply(lambda current: Session(None, None, current.is_loading))

    def clear_auth(self) -> None:
        self.logout()

    def _apply(self, mutate: Callable[[Session], Session], *, persist: bool = True) -> None:
        with self._lock:
            self._session = mutate(self._session)
            session = self._session
            listeners = list(self._listeners)
        if persist:
            self._persist(session)
        for listener in listeners:
            try:
                listener(session)
            except Exception:
                logger.exception("session_listener_failed")

    def _persist(self, session: Session) -> None:
        state: Dict[str, Any] = {
            "token": session.token,
            "user": session.user.to_dict() if session.user else None,
            "isAuthenticated": session.is_authenticated,
        }
        try:
            self._storage.write(self._storage_key, {"state": state, "version": STORAGE_VERSION})
        except OSError:
            logger.exception("session_persist_failed", extra={"storage_key": self._storage_key})

    def _rehydrate(self) -> Session:
        try:
            stored = self._storage.read(self._storage_key)
        except (OSError, ValueError):
            logger.warning("session_storage_corrupt", extra={"storage_key": self._storage_key}, exc_info=True)
            return Session()
        if not isinstance(stored, dict):
            return Session()
        state = stored.get("state") if isinstance(stored.get("state"), dict) else {}
        token = str(state.get("token") or "").strip() or None
        user = User.from_dict(state.get("user"))
        if token is None or user is None:
            return Session()
        return Session(token=token, user=user)
