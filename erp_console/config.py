from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from erp_console.ui_strings import operator_message


DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_STORAGE_KEY = "auth-storage"
DEFAULT_SIGNIN_PATH = "/auth/signin"


def _bool_env(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _str_env(name: str, default: str) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


class Config:
    BASE_DIR = os.path.dirname(os.path.dirname(__file__))

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-erp-console")
    ERP_API_URL = _str_env("ERP_API_URL", DEFAULT_API_URL)
    SESSION_STORAGE_BACKEND = _str_env("SESSION_STORAGE_BACKEND", "file").lower()
    SESSION_STORAGE_DIR = _str_env("SESSION_STORAGE_DIR", os.path.join(BASE_DIR, "instance"))
    SESSION_STORAGE_KEY = _str_env("SESSION_STORAGE_KEY", DEFAULT_STORAGE_KEY)
    SIGNIN_PATH = _str_env("SIGNIN_PATH", DEFAULT_SIGNIN_PATH)
    ERP_VERIFY_SSL = _bool_env("ERP_VERIFY_SSL", True)
    LOG_JSON = _bool_env("LOG_JSON", True)
    LOG_LEVEL = _str_env("LOG_LEVEL", "INFO")

    def __init__(self):
        env = os.environ.get("FLASK_ENV", "development").lower()
        if env == "production" and self.SECRET_KEY == "dev-secret-erp-console":
            raise RuntimeError(operator_message("insecure_secret_key"))


@dataclass(frozen=True)
class ClientSettings:
    base_url: str = DEFAULT_API_URL
    storage_backend: str = "memory"
    storage_dir: str | None = None
    storage_key: str = DEFAULT_STORAGE_KEY
    signin_path: str = DEFAULT_SIGNIN_PATH
    verify_ssl: bool = True

    @staticmethod
    def from_mapping(config: Mapping[str, Any]) -> "ClientSettings":
        base_url = str(config.get("ERP_API_URL") or "").strip() or DEFAULT_API_URL
        backend = str(config.get("SESSION_STORAGE_BACKEND") or "memory").strip().lower()
        if backend not in {"file", "memory"}:
            raise ValueError(operator_message("invalid_storage_backend", backend=backend))
        storage_dir = str(config.get("SESSION_STORAGE_DIR") or "").strip() or None
        if backend == "file" and not storage_dir:
            raise ValueError(operator_message("storage_dir_missing"))
        return ClientSettings(
            base_url=base_url.rstrip("/"),
            storage_backend=backend,
            storage_dir=storage_dir,
            storage_key=str(config.get("SESSION_STORAGE_KEY") or "").strip() or DEFAULT_STORAGE_KEY,
            signin_path=str(config.get("SIGNIN_PATH") or "").strip() or DEFAULT_SIGNIN_PATH,
            verify_ssl=bool(config.get("ERP_VERIFY_SSL", True)),
        )
