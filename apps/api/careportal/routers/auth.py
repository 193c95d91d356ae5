from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext, get_auth_context
from careportal.core.db import get_db
from careportal.schemas.users import UserDetailsResponse
from careportal.services.households import household_ids_for_patient

router = APIRouter(tags=["auth"])


@router.get("/user", response_model=UserDetailsResponse)
def get_user_details(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    """
    Returns the caller's resolved identity.

    For patients, is_in_household reports whether any household has accepted them.
    """
    in_household = bool(household_ids_for_patient(db, ctx.user_id)) if ctx.is_patient else False
    return UserDetailsResponse(user_id=ctx.user_id, role=ctx.role.value, is_in_household=in_household)
