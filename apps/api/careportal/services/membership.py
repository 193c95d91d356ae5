from __future__ import annotations

from sqlalchemy.orm import Session

from careportal.models.entities import InvitationStatusEnum
from careportal.services.households import get_or_create_household, list_member_rows, list_members
from careportal.services.invitations import list_for_admin
from careportal.services.users import patient_summaries

# Dashboard labels; "canceled" is the display name for rejected invitations.
STATUS_BOARD_LABELS = {
    InvitationStatusEnum.pending: "pending",
    InvitationStatusEnum.accepted: "approved",
    InvitationStatusEnum.rejected: "canceled",
}


def household_view(db: Session, admin_id: int) -> dict:
    household = get_or_create_household(db, admin_id)
    return {"household_id": household.id, "patients": list_members(db, household.id)}


def patient_status_board(db: Session, admin_id: int) -> dict[str, list[dict]]:
    household = get_or_create_household(db, admin_id)
    grouped = list_for_admin(db, admin_id)
    joined_at = {row.patient_id: row.joined_at for row in list_member_rows(db, household.id)}
    summaries = patient_summaries(
        db, [invitation.patient_id for invitations in grouped.values() for invitation in invitations]
    )

    board: dict[str, list[dict]] = {label: [] for label in STATUS_BOARD_LABELS.values()}
    for status, invitations in grouped.items():
        label = STATUS_BOARD_LABELS[status]
        for invitation in invitations:
            summary = summaries.get(invitation.patient_id)
            if summary is None:
                continue
            board[label].append(
                {
                    **summary,
                    "invitation_id": invitation.id,
                    "status": label,
                    "joined_at": joined_at.get(invitation.patient_id) if status == InvitationStatusEnum.accepted else None,
                }
            )
    return board
