from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from erp_console.config import ClientSettings
from erp_console.contexts.api.application.requester import AuthenticatedRequester
from erp_console.contexts.api.infrastructure.transport import Transport, UrllibTransport
from erp_console.contexts.auth.application.service import AuthClient, Navigator
from erp_console.contexts.auth.infrastructure.session_store import SessionStore
from erp_console.contexts.auth.infrastructure.storage import (
    JsonFileSessionStorage,
    MemorySessionStorage,
    SessionStorage,
)
from erp_console.contexts.dashboard.application.service import DashboardService
from erp_console.contexts.purchase.application.service import PurchaseService
from erp_console.ui_strings import operator_message


EXTENSION_KEY = "erp_console"


@dataclass(frozen=True)
class ConsoleContext:
    settings: ClientSettings
    session_store: SessionStore
    requester: AuthenticatedRequester
    auth_client: AuthClient
    purchase_service: PurchaseService
    dashboard_service: DashboardService


def build_storage(settings: ClientSettings) -> SessionStorage:
    if settings.storage_backend == "file" and settings.storage_dir:
        return JsonFileSessionStorage(settings.storage_dir)
    return MemorySessionStorage()


def build_context(
    settings: ClientSettings,
    *,
    transport: Transport | None = None,
    storage: SessionStorage | None = None,
    navigator: Navigator | None = None,
) -> ConsoleContext:
    session_store = SessionStore(storage or build_storage(settings), storage_key=settings.storage_key)
    transport = transport or UrllibTransport(verify_ssl=settings.verify_ssl)
    requester = AuthenticatedRequester(settings.base_url, session_store, transport)
    auth_client = AuthClient(requester, signin_path=settings.signin_path, navigator=navigator)
    return ConsoleContext(
        settings=settings,
        session_store=session_store,
        requester=requester,
        auth_client=auth_client,
        purchase_service=PurchaseService(requester),
        dashboard_service=DashboardService(requester),
    )


def current_context() -> ConsoleContext:
    context = current_app.extensions.get(EXTENSION_KEY)
    if context is None:
        raise RuntimeError(operator_message("context_missing"))
    return context
