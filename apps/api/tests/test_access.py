import pytest

from careportal.core.errors import Forbidden
from careportal.services.access import (
    can_access_patient,
    require_admin,
    require_patient,
    require_patient_access,
)
from careportal.services.households import add_member, get_or_create_household
from conftest import as_admin, as_patient


def test_admin_reaches_only_household_members(db_session, users):
    household = get_or_create_household(db_session, users["admin"])
    add_member(db_session, household.id, users["patient"])
    db_session.commit()

    assert can_access_patient(db_session, as_admin(users["admin"]), users["patient"])
    assert not can_access_patient(db_session, as_admin(users["admin"]), users["other_patient"])
    assert not can_access_patient(db_session, as_admin(users["other_admin"]), users["patient"])


def test_admin_without_household_reaches_nobody(db_session, users):
    assert not can_access_patient(db_session, as_admin(users["admin"]), users["patient"])


def test_patient_reaches_only_own_record(db_session, users):
    assert can_access_patient(db_session, as_patient(users["patient"]), users["patient"])
    assert not can_access_patient(db_session, as_patient(users["patient"]), users["other_patient"])


def test_require_patient_access_raises_forbidden(db_session, users):
    with pytest.raises(Forbidden) as exc_info:
        require_patient_access(db_session, as_patient(users["other_patient"]), users["patient"])
    assert exc_info.value.status_code == 403


def test_role_requirements():
    assert require_admin(as_admin(1)).user_id == 1
    assert require_patient(as_patient(42)).user_id == 42
    with pytest.raises(Forbidden):
        require_admin(as_patient(42))
    with pytest.raises(Forbidden):
        require_patient(as_admin(1))
