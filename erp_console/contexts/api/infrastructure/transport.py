from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from erp_console.ui_strings import operator_message


class TransportError(RuntimeError):
    """The remote API could not be reached (DNS, refused connection, TLS...)."""


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= int(self.status_code) < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON; raises ``ValueError`` on an empty or invalid body."""
        return json.loads(self.text())


class Transport(ABC):
    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        data: bytes | None = None,
    ) -> ApiResponse:
        raise NotImplementedError


class UrllibTransport(Transport):
    def __init__(self, *, verify_ssl: bool = True) -> None:
        self._context = None if verify_ssl else ssl._create_unverified_context()

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        data: bytes | None = None,
    ) -> ApiResponse:
        request = urllib.request.Request(url, data=data, headers=dict(headers), method=method.upper())
        try:
            with urllib.request.urlopen(request, context=self._context) as response:
                return ApiResponse(
                    status_code=int(response.status),
                    body=response.read(),
                    headers=dict(response.headers.items()),
                    url=url,
                )
        except urllib.error.HTTPError as exc:
            error_body = exc.read() if exc.fp else b""
            return ApiResponse(
                status_code=int(exc.code),
                body=error_body,
                headers=dict(exc.headers.items()) if exc.headers else {},
                url=url,
            )
        except urllib.error.URLError as exc:
            raise TransportError(operator_message("api_connection_failed", reason=exc.reason)) from exc
        except OSError as exc:
            raise TransportError(operator_message("api_connection_failed", reason=exc)) from exc
