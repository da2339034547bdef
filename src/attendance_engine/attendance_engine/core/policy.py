from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .enums import Role, normalize_enum
from .exceptions import AuthorizationError


class Capability(str, Enum):
    RECORD = "RECORD"
    REQUEST = "REQUEST"
    APPROVE = "APPROVE"
    VALIDATE = "VALIDATE"
    CORRECT = "CORRECT"
    CONFIGURE = "CONFIGURE"
    REPORT = "REPORT"


@dataclass(frozen=True)
class Actor:
    """Who is calling. Built by the controller layer from the session."""

    user_id: int
    role: Role
    employee_id: Optional[int] = None

    @classmethod
    def from_session(cls, data: dict) -> "Actor":
        employee_id = data.get("employee_id")
        return cls(
            user_id=int(data["user_id"]),
            role=normalize_enum(Role, data.get("role") or Role.USER.value),
            employee_id=int(employee_id) if employee_id is not None else None,
        )


class AccessPolicy(Protocol):
    """Capability check consulted before every mutating operation."""

    def is_allowed(self, actor: Actor, *, employee_id: Optional[int], capability: Capability) -> bool:
        raise NotImplementedError


_SELF_SERVICE = frozenset({Capability.RECORD, Capability.REQUEST, Capability.REPORT})


class RoleAccessPolicy:
    """Administrators and managers may do everything; users act on themselves."""

    def is_allowed(self, actor: Actor, *, employee_id: Optional[int], capability: Capability) -> bool:
        if actor.role in (Role.ADMINISTRATOR, Role.MANAGER):
            return True
        if capability not in _SELF_SERVICE:
            return False
        return employee_id is not None and actor.employee_id == int(employee_id)


def require(policy: AccessPolicy, actor: Actor, *, employee_id: Optional[int], capability: Capability) -> None:
    if not policy.is_allowed(actor, employee_id=employee_id, capability=capability):
        raise AuthorizationError(f"Not allowed: {capability.value.lower()}")
