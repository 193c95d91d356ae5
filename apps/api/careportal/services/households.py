from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careportal.models.entities import Household, HouseholdMember
from careportal.services.users import patient_summaries

logger = logging.getLogger(__name__)


def get_household_for_admin(db: Session, admin_id: int) -> Household | None:
    return db.execute(select(Household).where(Household.admin_id == admin_id)).scalar_one_or_none()


def get_or_create_household(db: Session, admin_id: int) -> Household:
    """
    Return the admin's household, creating it on first use.

    The unique admin_id column is the serialization point: a concurrent
    creator losing the insert race rolls back and picks up the winner's row.
    Call this before any other pending writes in the session.
    """
    household = get_household_for_admin(db, admin_id)
    if household is not None:
        return household

    household = Household(admin_id=admin_id)
    db.add(household)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        household = get_household_for_admin(db, admin_id)
        if household is None:
            raise
        return household

    db.refresh(household)
    logger.info("created household %s for admin %s", household.id, admin_id)
    return household


def is_member(db: Session, household_id: int, patient_id: int) -> bool:
    return (
        db.execute(
            select(HouseholdMember.id).where(
                HouseholdMember.household_id == household_id,
                HouseholdMember.patient_id == patient_id,
            )
        ).first()
        is not None
    )


def add_member(db: Session, household_id: int, patient_id: int) -> HouseholdMember:
    """
    Add a patient to a household. Adding an existing member is a no-op.

    Does not commit; the caller owns the transaction so membership lands
    together with whatever triggered it.
    """
    existing = db.execute(
        select(HouseholdMember).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.patient_id == patient_id,
        )
    ).scalar_one_or_none()
    if existing is not None:
        return existing

    member = HouseholdMember(household_id=household_id, patient_id=patient_id)
    db.add(member)
    db.flush()
    logger.info("added patient %s to household %s", patient_id, household_id)
    return member


def list_member_rows(db: Session, household_id: int) -> list[HouseholdMember]:
    return list(
        db.execute(
            select(HouseholdMember)
            .where(HouseholdMember.household_id == household_id)
            .order_by(HouseholdMember.joined_at.asc(), HouseholdMember.id.asc())
        ).scalars()
    )


def list_members(db: Session, household_id: int) -> list[dict]:
    rows = list_member_rows(db, household_id)
    summaries = patient_summaries(db, [row.patient_id for row in rows])
    return [summaries[row.patient_id] for row in rows if row.patient_id in summaries]


def household_ids_for_patient(db: Session, patient_id: int) -> list[int]:
    return [
        row[0]
        for row in db.execute(
            select(HouseholdMember.household_id)
            .where(HouseholdMember.patient_id == patient_id)
            .order_by(HouseholdMember.household_id.asc())
        ).all()
    ]
