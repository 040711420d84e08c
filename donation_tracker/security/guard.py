"""
Role-based authorization.

check_role is a pure function of an identity's role and an
allow-list. It has no side effects; the FastAPI dependencies in
donation_tracker.api.deps wrap it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from donation_tracker.models.enums import AdminRole

logger = logging.getLogger(__name__)

ANY_ADMIN = frozenset({AdminRole.ADMIN, AdminRole.SUPER_ADMIN})
SUPER_ADMIN_ONLY = frozenset({AdminRole.SUPER_ADMIN})

AUTHORIZATION_REQUIRED = "authorization required"
INSUFFICIENT_PRIVILEGES = "insufficient privileges"


class AccessDenied(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class CurrentAdmin:
    """The identity carried by a verified session token."""
    id: int
    email: str
    full_name: str | None
    role: AdminRole

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "CurrentAdmin":
        return cls(
            id=claims["id"],
            email=claims.get("email", ""),
            full_name=claims.get("full_name"),
            role=role_from_claim(claims.get("role")),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
        }


def role_from_claim(raw: Any) -> AdminRole:
    """
    Map a token's role claim to a role.

    A missing claim falls back to the least-privileged role.
    An unknown value also falls back, so a tampered claim can
    never elevate privileges.
    """
    if raw is None:
        return AdminRole.ADMIN
    try:
        return AdminRole(raw)
    except ValueError:
        logger.warning("Unknown role claim %r treated as admin", raw)
        return AdminRole.ADMIN


def check_role(role: AdminRole | str | None, allowed: frozenset) -> None:
    """
    Raise AccessDenied unless role is in allowed.

    401 when there is no identity at all, 403 when the role is
    not permitted. The message never names the required role.
    """
    if role is None:
        raise AccessDenied(401, AUTHORIZATION_REQUIRED)
    if role_from_claim(role) not in allowed:
        raise AccessDenied(403, INSUFFICIENT_PRIVILEGES)
