"""initial schema: users, patient profiles, households, invitations

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


role_enum = postgresql.ENUM("admin", "patient", name="roleenum", create_type=False)
invitation_status_enum = postgresql.ENUM(
    "pending",
    "accepted",
    "rejected",
    name="invitationstatusenum",
    create_type=False,
)


def upgrade() -> None:
    bind = op.get_bind()
    role_enum.create(bind, checkfirst=True)
    invitation_status_enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=255), nullable=False, unique=True),
        sa.Column("role", role_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "patient_profiles",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("surname", sa.String(length=255), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=32), nullable=True),
        sa.Column("blood_type", sa.String(length=8), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("address", sa.String(length=512), nullable=True),
        sa.Column("medical_history", sa.Text(), nullable=True, server_default=""),
        sa.Column("allergies", sa.Text(), nullable=True, server_default=""),
        sa.Column("medications", sa.Text(), nullable=True, server_default=""),
        sa.Column("emergency_contact_name", sa.String(length=255), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(length=64), nullable=True),
        sa.Column("emergency_contact_phone_number", sa.String(length=64), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "households",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "household_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("household_id", sa.Integer(), sa.ForeignKey("households.id"), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_household_members_household_patient",
        "household_members",
        ["household_id", "patient_id"],
        unique=True,
    )
    op.create_index("ix_household_members_patient", "household_members", ["patient_id"], unique=False)

    op.create_table(
        "invitations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("household_id", sa.Integer(), sa.ForeignKey("households.id"), nullable=False),
        sa.Column("status", invitation_status_enum, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_invitations_patient_created", "invitations", ["patient_id", "created_at"], unique=False)
    op.create_index("ix_invitations_admin_status", "invitations", ["admin_id", "status"], unique=False)
    # Serializes concurrent invites: only one pending row per admin/patient pair.
    op.create_index(
        "uq_invitations_pending_pair",
        "invitations",
        ["admin_id", "patient_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_invitations_pending_pair", table_name="invitations")
    op.drop_index("ix_invitations_admin_status", table_name="invitations")
    op.drop_index("ix_invitations_patient_created", table_name="invitations")
    op.drop_table("invitations")
    op.drop_index("ix_household_members_patient", table_name="household_members")
    op.drop_index("ix_household_members_household_patient", table_name="household_members")
    op.drop_table("household_members")
    op.drop_table("households")
    op.drop_table("patient_profiles")
    op.drop_table("users")

    bind = op.get_bind()
    invitation_status_enum.drop(bind, checkfirst=True)
    role_enum.drop(bind, checkfirst=True)
