"""
Invitation ledger.

An invitation starts ``pending`` and is resolved exactly once by the invited
patient, to ``accepted`` or ``rejected``. Both outcomes are terminal. Accepting
adds the patient to the admin's household in the same transaction as the
status change.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext
from careportal.core.config import settings
from careportal.core.errors import AlreadyMember, DuplicatePending, InvalidInput, NotFound, NotPending
from careportal.models.entities import Invitation, InvitationStatusEnum
from careportal.services.access import require_invitation_recipient
from careportal.services.households import add_member, get_or_create_household, is_member
from careportal.services.users import require_admin_user, require_patient_user

logger = logging.getLogger(__name__)


class InvitationDecision(str, Enum):
    accept = "accept"
    reject = "reject"


_DECISION_STATUS = {
    InvitationDecision.accept: InvitationStatusEnum.accepted,
    InvitationDecision.reject: InvitationStatusEnum.rejected,
}


def get_pending_invitation(db: Session, admin_id: int, patient_id: int) -> Invitation | None:
    return db.execute(
        select(Invitation).where(
            Invitation.admin_id == admin_id,
            Invitation.patient_id == patient_id,
            Invitation.status == InvitationStatusEnum.pending,
        )
    ).scalar_one_or_none()


def create_invitation(db: Session, admin_id: int, patient_id: int) -> Invitation:
    require_admin_user(db, admin_id)
    require_patient_user(db, patient_id)
    household = get_or_create_household(db, admin_id)

    if is_member(db, household.id, patient_id):
        raise AlreadyMember()
    if get_pending_invitation(db, admin_id, patient_id) is not None:
        raise DuplicatePending()

    now = datetime.now(timezone.utc)
    invitation = Invitation(
        admin_id=admin_id,
        patient_id=patient_id,
        household_id=household.id,
        status=InvitationStatusEnum.pending,
        created_at=now,
        updated_at=now,
    )
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent invite for the same pair.
        db.rollback()
        raise DuplicatePending() from None

    db.refresh(invitation)
    logger.info("created invitation %s: admin %s -> patient %s", invitation.id, admin_id, patient_id)
    return invitation


def _close_pending(db: Session, invitation_id: int, status: InvitationStatusEnum) -> None:
    """Compare-and-set pending -> status. Only one caller can win."""
    result = db.execute(
        update(Invitation)
        .where(Invitation.id == invitation_id, Invitation.status == InvitationStatusEnum.pending)
        .values(status=status, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise NotPending()


def respond_to_invitation(
    db: Session,
    invitation_id: int,
    caller: AuthContext,
    decision: InvitationDecision | str,
) -> Invitation:
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFound("invitation not found")
    require_invitation_recipient(caller, invitation)
    try:
        decision = InvitationDecision(decision)
    except ValueError:
        raise InvalidInput("invalid response; expected 'accept' or 'reject'") from None

    household_id = invitation.household_id
    patient_id = invitation.patient_id
    target = _DECISION_STATUS[decision]

    if decision is InvitationDecision.reject:
        _close_pending(db, invitation_id, target)
        db.commit()
    else:
        attempts = max(settings.respond_max_attempts, 1)
        for attempt in range(1, attempts + 1):
            try:
                _close_pending(db, invitation_id, target)
                add_member(db, household_id, patient_id)
                db.commit()
                break
            except OperationalError:
                db.rollback()
                if attempt >= attempts:
                    raise
                logger.warning(
                    "transient store conflict accepting invitation %s (attempt %s/%s), retrying",
                    invitation_id,
                    attempt,
                    attempts,
                )

    db.refresh(invitation)
    logger.info("invitation %s %s by patient %s", invitation_id, target.value, caller.user_id)
    return invitation


def list_for_patient(db: Session, patient_id: int) -> list[Invitation]:
    return list(
        db.execute(
            select(Invitation)
            .where(Invitation.patient_id == patient_id)
            .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        ).scalars()
    )


def list_for_admin(db: Session, admin_id: int) -> dict[InvitationStatusEnum, list[Invitation]]:
    grouped: dict[InvitationStatusEnum, list[Invitation]] = {status: [] for status in InvitationStatusEnum}
    rows = db.execute(
        select(Invitation)
        .where(Invitation.admin_id == admin_id)
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
    ).scalars()
    for invitation in rows:
        grouped[invitation.status].append(invitation)
    return grouped
