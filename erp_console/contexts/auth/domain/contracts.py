from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_USER = "USER"

ROLE_HIERARCHY: Dict[str, int] = {
    ROLE_ADMIN: 3,
    ROLE_MANAGER: 2,
    ROLE_USER: 1,
}


def role_rank(role: str | None) -> int:
    return ROLE_HIERARCHY.get(str(role or ""), 0)


def _safe_str(value: object | None) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    return raw or None


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str = ""
    department: str | None = None
    position: str | None = None
    phone: str | None = None
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "position": self.position,
            "phone": self.phone,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @staticmethod
    def from_dict(payload: Dict[str, Any] | None) -> "User | None":
        """Build a user from the API shape; ``None`` only when there is no user object."""
        if not isinstance(payload, dict):
            return None
        user_id = _safe_str(payload.get("_id")) or _safe_str(payload.get("id"))
        email = _safe_str(payload.get("email"))
        name = _safe_str(payload.get("name"))
        is_active = payload.get("isActive")
        return User(
            id=user_id or "",
            name=name or "",
            email=email or "",
            # Kept as sent: missing, unknown or differently-cased roles rank 0.
            role=str(payload.get("role") or ""),
            department=_safe_str(payload.get("department")),
            position=_safe_str(payload.get("position")),
            phone=_safe_str(payload.get("phone")),
            is_active=True if is_active is None else bool(is_active),
            created_at=_safe_str(payload.get("createdAt")),
            updated_at=_safe_str(payload.get("updatedAt")),
        )


@dataclass(frozen=True)
class Session:
    token: str | None = None
    user: User | None = None
    is_loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None


@dataclass(frozen=True)
class AuthResponse:
    status: str
    token: str | None = None
    user: User | None = None
    message: str | None = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status}
        if self.token:
            payload["token"] = self.token
        if self.user is not None:
            payload["data"] = {"user": self.user.to_dict()}
        if self.message:
            payload["message"] = self.message
        return payload

    @staticmethod
    def from_payload(payload: object) -> "AuthResponse":
        data = payload if isinstance(payload, dict) else {}
        envelope = data.get("data") if isinstance(data.get("data"), dict) else {}
        return AuthResponse(
            status=str(data.get("status") or "error"),
            token=_safe_str(data.get("token")),
            user=User.from_dict(envelope.get("user")),
            message=_safe_str(data.get("message")),
            raw=dict(data),
        )


@dataclass(frozen=True)
class RegisterInput:
    name: str
    email: str
    password: str
    role: str | None = None
    department: str | None = None
    position: str | None = None
    phone: str | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "department": self.department,
            "position": self.position,
            "phone": self.phone,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class ProfileUpdateInput:
    name: str | None = None
    department: str | None = None
    position: str | None = None
    phone: str | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "department": self.department,
            "position": self.position,
            "phone": self.phone,
        }
        return {key: value for key, value in payload.items() if value is not None}
