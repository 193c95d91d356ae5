import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext, get_auth_context
from careportal.core.db import get_db
from careportal.core.errors import Conflict
from careportal.models.entities import PatientProfile, User
from careportal.schemas.admins import AdminProfileResponse, AdminProfileUpdate
from careportal.schemas.patients import EmergencyContact
from careportal.services.access import require_admin
from careportal.services.users import require_admin_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin-profile"])


def _to_admin_response(user: User, profile: PatientProfile | None) -> AdminProfileResponse:
    if profile is None:
        return AdminProfileResponse(
            id=user.id, username=user.username, role=user.role.value, emergency_contact=EmergencyContact()
        )
    return AdminProfileResponse(
        id=user.id,
        username=user.username,
        role=user.role.value,
        name=profile.name,
        surname=profile.surname,
        date_of_birth=profile.date_of_birth,
        gender=profile.gender,
        address=profile.address,
        emergency_contact=EmergencyContact(
            name=profile.emergency_contact_name,
            relationship=profile.emergency_contact_relationship,
            phone_number=profile.emergency_contact_phone_number,
        ),
        updated_at=profile.updated_at,
    )


@router.get("/profile", response_model=AdminProfileResponse)
def get_admin_profile(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_admin(ctx)
    user = require_admin_user(db, ctx.user_id)
    return _to_admin_response(user, db.get(PatientProfile, user.id))


@router.post("/profile", response_model=AdminProfileResponse)
def update_admin_profile(
    payload: AdminProfileUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    """
    Update the caller's own personal details.

    Admins keep their details in the same profile table as patients, keyed by user id.
    """
    require_admin(ctx)
    user = require_admin_user(db, ctx.user_id)

    if payload.username is not None:
        username = payload.username.strip()
        if username != user.username:
            taken = db.execute(
                select(User.id).where(User.username == username, User.id != user.id)
            ).first()
            if taken is not None:
                raise Conflict("username already exists")
            user.username = username

    profile = db.get(PatientProfile, user.id)
    if profile is None:
        profile = PatientProfile(user_id=user.id)
        db.add(profile)

    changes = payload.model_dump(exclude_unset=True, exclude={"username", "emergency_contact"})
    for field, value in changes.items():
        setattr(profile, field, value)
    if payload.emergency_contact is not None:
        contact = payload.emergency_contact.model_dump(exclude_unset=True)
        for field, value in contact.items():
            setattr(profile, f"emergency_contact_{field}", value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("username already exists") from None

    db.refresh(user)
    db.refresh(profile)
    logger.info("admin %s updated their profile", user.id)
    return _to_admin_response(user, profile)
