from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from careportal.core.errors import InvalidAdmin, InvalidPatient
from careportal.models.entities import PatientProfile, RoleEnum, User


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def require_admin_user(db: Session, admin_id: int) -> User:
    user = get_user(db, admin_id)
    if user is None or user.role != RoleEnum.admin:
        raise InvalidAdmin()
    return user


def require_patient_user(db: Session, patient_id: int) -> User:
    user = get_user(db, patient_id)
    if user is None:
        raise InvalidPatient()
    if user.role != RoleEnum.patient:
        raise InvalidPatient("cannot invite an admin as a patient")
    return user


def patient_summaries(db: Session, patient_ids: Iterable[int]) -> dict[int, dict]:
    """Map patient id -> ``{id, username, name, surname}`` for the given ids."""
    ids = list(dict.fromkeys(patient_ids))
    if not ids:
        return {}
    rows = db.execute(
        select(User, PatientProfile)
        .outerjoin(PatientProfile, PatientProfile.user_id == User.id)
        .where(User.id.in_(ids))
    ).all()
    return {
        user.id: {
            "id": user.id,
            "username": user.username,
            "name": profile.name if profile else None,
            "surname": profile.surname if profile else None,
        }
        for user, profile in rows
    }
