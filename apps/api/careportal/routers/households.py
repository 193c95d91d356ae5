from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext, get_auth_context
from careportal.core.db import get_db
from careportal.models.entities import InvitationStatusEnum
from careportal.routers.invitations import to_invitation_response
from careportal.schemas.households import HouseholdPatientsResponse, PatientStatusBoardResponse
from careportal.schemas.invitations import AdminInvitationsResponse
from careportal.services.access import require_admin
from careportal.services.invitations import list_for_admin
from careportal.services.membership import household_view, patient_status_board

router = APIRouter(prefix="/household", tags=["household"])


@router.get("/patients", response_model=HouseholdPatientsResponse)
def get_household_patients(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_admin(ctx)
    return household_view(db, ctx.user_id)


@router.get("/patient-statuses", response_model=PatientStatusBoardResponse)
def get_patient_statuses(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_admin(ctx)
    return patient_status_board(db, ctx.user_id)


@router.get("/invitations", response_model=AdminInvitationsResponse)
def get_household_invitations(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_admin(ctx)
    grouped = list_for_admin(db, ctx.user_id)
    return AdminInvitationsResponse(
        pending=[to_invitation_response(item) for item in grouped[InvitationStatusEnum.pending]],
        accepted=[to_invitation_response(item) for item in grouped[InvitationStatusEnum.accepted]],
        rejected=[to_invitation_response(item) for item in grouped[InvitationStatusEnum.rejected]],
    )
