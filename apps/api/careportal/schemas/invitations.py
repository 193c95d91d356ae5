from datetime import datetime

from pydantic import BaseModel, Field


class InvitationCreate(BaseModel):
    admin_id: int | None = Field(default=None, ge=1)
    patient_id: int = Field(ge=1)


class InvitationRespond(BaseModel):
    invitation_id: int = Field(ge=1)
    response: str


class InvitationResponse(BaseModel):
    id: int
    admin_id: int
    patient_id: int
    household_id: int
    status: str
    created_at: datetime
    updated_at: datetime


class InvitationCreatedResponse(BaseModel):
    success: str
    invitation_id: int


class InvitationRespondedResponse(BaseModel):
    success: str
    invitation: InvitationResponse


class InvitationListResponse(BaseModel):
    invitations: list[InvitationResponse]


class AdminInvitationsResponse(BaseModel):
    pending: list[InvitationResponse]
    accepted: list[InvitationResponse]
    rejected: list[InvitationResponse]
