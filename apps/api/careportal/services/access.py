from __future__ import annotations

from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext
from careportal.core.errors import Forbidden
from careportal.models.entities import Invitation
from careportal.services.households import get_household_for_admin, is_member


def require_admin(ctx: AuthContext) -> AuthContext:
    if not ctx.is_admin:
        raise Forbidden("admin role required")
    return ctx


def require_patient(ctx: AuthContext) -> AuthContext:
    if not ctx.is_patient:
        raise Forbidden("patient role required")
    return ctx


def can_access_patient(db: Session, ctx: AuthContext, patient_id: int) -> bool:
    """
    Admins reach patients in their own household; patients reach only themselves.
    """
    if ctx.is_patient:
        return ctx.user_id == patient_id
    if ctx.is_admin:
        household = get_household_for_admin(db, ctx.user_id)
        return household is not None and is_member(db, household.id, patient_id)
    return False


def require_patient_access(db: Session, ctx: AuthContext, patient_id: int) -> None:
    if not can_access_patient(db, ctx, patient_id):
        raise Forbidden("not allowed to access this patient record")


def require_invitation_recipient(ctx: AuthContext, invitation: Invitation) -> None:
    if not ctx.is_patient or invitation.patient_id != ctx.user_id:
        raise Forbidden("only the invited patient may respond to this invitation")
