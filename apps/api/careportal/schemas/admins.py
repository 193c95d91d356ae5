from datetime import date, datetime

from pydantic import BaseModel, Field

from careportal.schemas.patients import EmergencyContact


class AdminProfileUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    surname: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=512)
    emergency_contact: EmergencyContact | None = None


class AdminProfileResponse(BaseModel):
    id: int
    username: str
    role: str
    name: str | None = None
    surname: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    address: str | None = None
    emergency_contact: EmergencyContact
    updated_at: datetime | None = None
