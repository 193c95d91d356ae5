import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext, get_auth_context
from careportal.core.db import get_db
from careportal.models.entities import PatientProfile, User
from careportal.schemas.patients import EmergencyContact, PatientRecordStatus, PatientResponse, PatientUpdate
from careportal.services.access import require_patient_access
from careportal.services.users import require_patient_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patient", tags=["patients"])


def _to_patient_response(user: User, profile: PatientProfile | None) -> PatientResponse:
    if profile is None:
        return PatientResponse(id=user.id, username=user.username, emergency_contact=EmergencyContact())
    return PatientResponse(
        id=user.id,
        username=user.username,
        name=profile.name,
        surname=profile.surname,
        date_of_birth=profile.date_of_birth,
        gender=profile.gender,
        blood_type=profile.blood_type,
        height=profile.height,
        address=profile.address,
        medical_history=profile.medical_history or "",
        allergies=profile.allergies or "",
        medications=profile.medications or "",
        emergency_contact=EmergencyContact(
            name=profile.emergency_contact_name,
            relationship=profile.emergency_contact_relationship,
            phone_number=profile.emergency_contact_phone_number,
        ),
        updated_at=profile.updated_at,
    )


@router.get("/{patient_id}/exists", response_model=PatientRecordStatus)
def check_patient_record(
    patient_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    """Reports whether the patient has saved their details yet."""
    require_patient_access(db, ctx, patient_id)
    require_patient_user(db, patient_id)
    return PatientRecordStatus(patient_id=patient_id, exists=db.get(PatientProfile, patient_id) is not None)


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_patient_access(db, ctx, patient_id)
    user = require_patient_user(db, patient_id)
    return _to_patient_response(user, db.get(PatientProfile, patient_id))


@router.post("/edit/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_patient_access(db, ctx, patient_id)
    user = require_patient_user(db, patient_id)

    profile = db.get(PatientProfile, patient_id)
    if profile is None:
        profile = PatientProfile(user_id=patient_id)
        db.add(profile)

    changes = payload.model_dump(exclude_unset=True, exclude={"emergency_contact"})
    for field, value in changes.items():
        setattr(profile, field, value)
    if payload.emergency_contact is not None:
        contact = payload.emergency_contact.model_dump(exclude_unset=True)
        for field, value in contact.items():
            setattr(profile, f"emergency_contact_{field}", value)

    db.commit()
    db.refresh(profile)
    logger.info("patient %s record updated by %s %s", patient_id, ctx.role.value, ctx.user_id)
    return _to_patient_response(user, profile)
