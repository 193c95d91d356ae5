from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from careportal.core.auth import AuthContext, get_auth_context
from careportal.core.db import get_db
from careportal.core.errors import Forbidden
from careportal.models.entities import Invitation
from careportal.schemas.invitations import (
    InvitationCreate,
    InvitationCreatedResponse,
    InvitationListResponse,
    InvitationRespond,
    InvitationRespondedResponse,
    InvitationResponse,
)
from careportal.services.access import require_admin, require_patient
from careportal.services.invitations import create_invitation, list_for_patient, respond_to_invitation

router = APIRouter(tags=["invitations"])


def to_invitation_response(invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        admin_id=invitation.admin_id,
        patient_id=invitation.patient_id,
        household_id=invitation.household_id,
        status=invitation.status.value,
        created_at=invitation.created_at,
        updated_at=invitation.updated_at,
    )


@router.post("/create-invitation", response_model=InvitationCreatedResponse)
def create_invitation_endpoint(
    payload: InvitationCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_admin(ctx)
    admin_id = payload.admin_id if payload.admin_id is not None else ctx.user_id
    if admin_id != ctx.user_id:
        raise Forbidden("admins may only invite into their own household")

    invitation = create_invitation(db, admin_id, payload.patient_id)
    return InvitationCreatedResponse(success="Invitation created successfully", invitation_id=invitation.id)


@router.post("/respond-invitation", response_model=InvitationRespondedResponse)
def respond_invitation_endpoint(
    payload: InvitationRespond,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    invitation = respond_to_invitation(db, payload.invitation_id, ctx, payload.response)
    return InvitationRespondedResponse(
        success="Invitation processed successfully",
        invitation=to_invitation_response(invitation),
    )


@router.get("/invitations", response_model=InvitationListResponse)
def list_invitations(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    require_patient(ctx)
    return InvitationListResponse(invitations=[to_invitation_response(item) for item in list_for_patient(db, ctx.user_id)])
