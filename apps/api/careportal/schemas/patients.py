from datetime import date, datetime

from pydantic import BaseModel, Field


class EmergencyContact(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    relationship: str | None = Field(default=None, max_length=64)
    phone_number: str | None = Field(default=None, max_length=64)


class PatientUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    surname: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=32)
    blood_type: str | None = Field(default=None, max_length=8)
    height: float | None = Field(default=None, gt=0)
    address: str | None = Field(default=None, max_length=512)
    medical_history: str | None = None
    allergies: str | None = None
    medications: str | None = None
    emergency_contact: EmergencyContact | None = None


class PatientResponse(BaseModel):
    id: int
    username: str
    name: str | None = None
    surname: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    blood_type: str | None = None
    height: float | None = None
    address: str | None = None
    medical_history: str = ""
    allergies: str = ""
    medications: str = ""
    emergency_contact: EmergencyContact
    updated_at: datetime | None = None


class PatientRecordStatus(BaseModel):
    patient_id: int
    exists: bool
