from datetime import datetime

from pydantic import BaseModel


class PatientSummary(BaseModel):
    id: int
    username: str
    name: str | None = None
    surname: str | None = None


class HouseholdPatientsResponse(BaseModel):
    household_id: int
    patients: list[PatientSummary]


class PatientStatusEntry(PatientSummary):
    invitation_id: int
    status: str
    joined_at: datetime | None = None


class PatientStatusBoardResponse(BaseModel):
    pending: list[PatientStatusEntry]
    approved: list[PatientStatusEntry]
    canceled: list[PatientStatusEntry]
