import importlib.util
from datetime import datetime, timezone
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import DateTime, create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from careportal.models.base import Base

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_initial.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("initial_migration", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migrated_engine():
    engine = create_engine("sqlite://")
    migration = _load_migration()
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
    yield engine
    engine.dispose()


def _insert_invitation(conn, status: str) -> None:
    now = datetime.now(timezone.utc).isoformat()
    conn.execute(
        text(
            "INSERT INTO invitations (admin_id, patient_id, household_id, status, created_at, updated_at) "
            "VALUES (1, 42, 1, :status, :now, :now)"
        ),
        {"status": status, "now": now},
    )


def test_migrated_schema_allows_reinvite_after_rejection(migrated_engine):
    now = datetime.now(timezone.utc).isoformat()
    with migrated_engine.begin() as conn:
        conn.execute(
            text("INSERT INTO users (id, username, role, created_at) VALUES (1, 'carol', 'admin', :now), (42, 'pat', 'patient', :now)"),
            {"now": now},
        )
        conn.execute(text("INSERT INTO households (id, admin_id, created_at) VALUES (1, 1, :now)"), {"now": now})
        _insert_invitation(conn, "rejected")
        _insert_invitation(conn, "rejected")
        _insert_invitation(conn, "pending")

    with pytest.raises(IntegrityError):
        with migrated_engine.begin() as conn:
            _insert_invitation(conn, "pending")


def test_migrated_schema_matches_models(migrated_engine):
    inspector = inspect(migrated_engine)
    for table in Base.metadata.sorted_tables:
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name

    indexes = {index["name"] for index in inspector.get_indexes("invitations")}
    assert "uq_invitations_pending_pair" in indexes


def test_timestamp_columns_are_timezone_aware():
    for table in Base.metadata.sorted_tables:
        for column in table.columns:
            if isinstance(column.type, DateTime):
                assert column.type.timezone, f"{table.name}.{column.name}"
