from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header

from careportal.core.errors import Unauthorized
from careportal.models.entities import RoleEnum


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    role: RoleEnum

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin

    @property
    def is_patient(self) -> bool:
        return self.role == RoleEnum.patient


def get_auth_context(
    x_forwarded_user_id: str | None = Header(default=None, alias="X-Forwarded-User-Id"),
    x_forwarded_user_role: str | None = Header(default=None, alias="X-Forwarded-User-Role"),
) -> AuthContext:
    """
    Auth boundary.

    Bearer tokens are validated by the upstream auth proxy, which forwards the
    resolved identity as X-Forwarded-User-Id / X-Forwarded-User-Role. This
    service trusts those values and never inspects tokens itself.
    """
    if not x_forwarded_user_id or not x_forwarded_user_role:
        raise Unauthorized("missing auth headers (X-Forwarded-User-Id, X-Forwarded-User-Role)")
    try:
        user_id = int(x_forwarded_user_id)
    except ValueError:
        raise Unauthorized("invalid user id header") from None
    try:
        role = RoleEnum(x_forwarded_user_role.strip().lower())
    except ValueError:
        raise Unauthorized("invalid role header") from None
    return AuthContext(user_id=user_id, role=role)
