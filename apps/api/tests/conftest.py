import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careportal.core.auth import AuthContext
from careportal.core.db import get_db
from careportal.main import app
from careportal.models.base import Base
from careportal.models import entities  # noqa: F401
from careportal.models.entities import RoleEnum, User


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


def auth_headers(user_id: int, role: str) -> dict[str, str]:
    return {"X-Forwarded-User-Id": str(user_id), "X-Forwarded-User-Role": role}


def as_admin(user_id: int) -> AuthContext:
    return AuthContext(user_id=user_id, role=RoleEnum.admin)


def as_patient(user_id: int) -> AuthContext:
    return AuthContext(user_id=user_id, role=RoleEnum.patient)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def users(db_session):
    """Admin 1 and 2, patients 42 and 43."""
    db_session.add_all(
        [
            User(id=1, username="carol.caregiver", role=RoleEnum.admin),
            User(id=2, username="dan.caregiver", role=RoleEnum.admin),
            User(id=42, username="pat.patient", role=RoleEnum.patient),
            User(id=43, username="sam.patient", role=RoleEnum.patient),
        ]
    )
    db_session.commit()
    return {"admin": 1, "other_admin": 2, "patient": 42, "other_patient": 43}
