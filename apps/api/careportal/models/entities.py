from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from careportal.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoleEnum(str, Enum):
    admin = "admin"
    patient = "patient"


class InvitationStatusEnum(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


invitation_status_sql_enum = SqlEnum(
    InvitationStatusEnum,
    name="invitationstatusenum",
    values_callable=lambda enum_cls: [item.value for item in enum_cls],
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[RoleEnum] = mapped_column(SqlEnum(RoleEnum), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class PatientProfile(Base):
    __tablename__ = "patient_profiles"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255))
    surname: Mapped[str | None] = mapped_column(String(255))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(32))
    blood_type: Mapped[str | None] = mapped_column(String(8))
    height: Mapped[float | None] = mapped_column(Float)
    address: Mapped[str | None] = mapped_column(String(512))
    medical_history: Mapped[str | None] = mapped_column(Text, default="")
    allergies: Mapped[str | None] = mapped_column(Text, default="")
    medications: Mapped[str | None] = mapped_column(Text, default="")
    emergency_contact_name: Mapped[str | None] = mapped_column(String(255))
    emergency_contact_relationship: Mapped[str | None] = mapped_column(String(64))
    emergency_contact_phone_number: Mapped[str | None] = mapped_column(String(64))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class Household(Base):
    __tablename__ = "households"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    admin_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class HouseholdMember(Base):
    __tablename__ = "household_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    household_id: Mapped[int] = mapped_column(ForeignKey("households.id"), nullable=False)
    patient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Invitation(Base):
    __tablename__ = "invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    admin_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    patient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    household_id: Mapped[int] = mapped_column(ForeignKey("households.id"), nullable=False)
    status: Mapped[InvitationStatusEnum] = mapped_column(
        invitation_status_sql_enum, nullable=False, default=InvitationStatusEnum.pending
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


Index("ix_household_members_household_patient", HouseholdMember.household_id, HouseholdMember.patient_id, unique=True)
Index("ix_household_members_patient", HouseholdMember.patient_id)
Index("ix_invitations_patient_created", Invitation.patient_id, Invitation.created_at)
Index("ix_invitations_admin_status", Invitation.admin_id, Invitation.status)
# At most one open invitation per admin/patient pair.
Index(
    "uq_invitations_pending_pair",
    Invitation.admin_id,
    Invitation.patient_id,
    unique=True,
    postgresql_where=text("status = 'pending'"),
    sqlite_where=text("status = 'pending'"),
)
