import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from careportal.core.errors import (
    AlreadyMember,
    DuplicatePending,
    Forbidden,
    InvalidAdmin,
    InvalidInput,
    InvalidPatient,
    NotFound,
    NotPending,
)
from careportal.models.entities import HouseholdMember, Invitation, InvitationStatusEnum
from careportal.services import invitations as invitation_service
from careportal.services.households import get_household_for_admin, is_member, list_members
from careportal.services.invitations import (
    create_invitation,
    list_for_admin,
    list_for_patient,
    respond_to_invitation,
)
from conftest import TestingSessionLocal, as_admin, as_patient


def _invitation_count(db_session) -> int:
    return db_session.execute(select(func.count(Invitation.id))).scalar_one()


def test_create_invitation_starts_pending_and_creates_household(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])

    assert invitation.status == InvitationStatusEnum.pending
    household = get_household_for_admin(db_session, users["admin"])
    assert household is not None
    assert invitation.household_id == household.id


def test_second_invitation_while_pending_fails(db_session, users):
    create_invitation(db_session, users["admin"], users["patient"])

    with pytest.raises(DuplicatePending):
        create_invitation(db_session, users["admin"], users["patient"])
    assert _invitation_count(db_session) == 1


def test_pending_pair_is_unique_at_the_store(db_session, users):
    first = create_invitation(db_session, users["admin"], users["patient"])

    db_session.add(
        Invitation(
            admin_id=users["admin"],
            patient_id=users["patient"],
            household_id=first.household_id,
            status=InvitationStatusEnum.pending,
        )
    )
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_other_admin_may_invite_same_patient(db_session, users):
    create_invitation(db_session, users["admin"], users["patient"])
    other = create_invitation(db_session, users["other_admin"], users["patient"])

    assert other.status == InvitationStatusEnum.pending
    assert _invitation_count(db_session) == 2


def test_invite_unknown_patient_inserts_nothing(db_session, users):
    with pytest.raises(InvalidPatient):
        create_invitation(db_session, users["admin"], 999)
    assert _invitation_count(db_session) == 0


def test_invite_admin_as_patient_fails(db_session, users):
    with pytest.raises(InvalidPatient):
        create_invitation(db_session, users["admin"], users["other_admin"])


def test_invite_from_non_admin_fails(db_session, users):
    with pytest.raises(InvalidAdmin):
        create_invitation(db_session, users["patient"], users["other_patient"])
    with pytest.raises(InvalidAdmin):
        create_invitation(db_session, 555, users["patient"])


def test_accept_adds_member_and_groups_as_accepted(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])

    result = respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    assert result.status == InvitationStatusEnum.accepted
    assert is_member(db_session, invitation.household_id, users["patient"])
    grouped = list_for_admin(db_session, users["admin"])
    assert [item.id for item in grouped[InvitationStatusEnum.accepted]] == [invitation.id]
    assert grouped[InvitationStatusEnum.pending] == []


def test_reject_leaves_membership_untouched(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])

    result = respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "reject")

    assert result.status == InvitationStatusEnum.rejected
    assert not is_member(db_session, invitation.household_id, users["patient"])
    grouped = list_for_admin(db_session, users["admin"])
    assert [item.id for item in grouped[InvitationStatusEnum.rejected]] == [invitation.id]


def test_resolved_invitation_cannot_be_answered_again(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    with pytest.raises(NotPending):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "reject")
    with pytest.raises(NotPending):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    db_session.expire_all()
    assert db_session.get(Invitation, invitation.id).status == InvitationStatusEnum.accepted
    members = db_session.execute(
        select(func.count(HouseholdMember.id)).where(HouseholdMember.patient_id == users["patient"])
    ).scalar_one()
    assert members == 1


def test_rejected_invitation_is_not_resurrected(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "reject")

    with pytest.raises(NotPending):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")
    assert not is_member(db_session, invitation.household_id, users["patient"])


def test_only_invited_patient_may_respond(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])

    with pytest.raises(Forbidden):
        respond_to_invitation(db_session, invitation.id, as_patient(users["other_patient"]), "accept")
    with pytest.raises(Forbidden):
        respond_to_invitation(db_session, invitation.id, as_admin(users["admin"]), "accept")

    respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "reject")

    # Still forbidden once resolved, not NotPending.
    with pytest.raises(Forbidden):
        respond_to_invitation(db_session, invitation.id, as_patient(users["other_patient"]), "accept")


def test_respond_unknown_invitation_and_bad_decision(db_session, users):
    with pytest.raises(NotFound):
        respond_to_invitation(db_session, 12345, as_patient(users["patient"]), "accept")

    invitation = create_invitation(db_session, users["admin"], users["patient"])
    with pytest.raises(InvalidInput):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "maybe")
    assert db_session.get(Invitation, invitation.id).status == InvitationStatusEnum.pending


def test_member_cannot_be_invited_again(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    with pytest.raises(AlreadyMember):
        create_invitation(db_session, users["admin"], users["patient"])


def test_rejected_pair_can_be_invited_again(db_session, users):
    first = create_invitation(db_session, users["admin"], users["patient"])
    respond_to_invitation(db_session, first.id, as_patient(users["patient"]), "reject")

    second = create_invitation(db_session, users["admin"], users["patient"])

    assert second.id != first.id
    assert second.status == InvitationStatusEnum.pending


def test_list_for_patient_is_newest_first(db_session, users):
    first = create_invitation(db_session, users["admin"], users["patient"])
    second = create_invitation(db_session, users["other_admin"], users["patient"])
    create_invitation(db_session, users["admin"], users["other_patient"])

    listed = list_for_patient(db_session, users["patient"])

    assert [item.id for item in listed] == [second.id, first.id]
    assert list_for_patient(db_session, users["patient"]) == listed


def test_accept_retries_transient_store_conflict(db_session, users, monkeypatch):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    real_add_member = invitation_service.add_member
    calls = {"count": 0}

    def flaky_add_member(db, household_id, patient_id):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("INSERT INTO household_members", {}, Exception("database is locked"))
        return real_add_member(db, household_id, patient_id)

    monkeypatch.setattr(invitation_service, "add_member", flaky_add_member)

    result = respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    assert calls["count"] == 2
    assert result.status == InvitationStatusEnum.accepted
    assert [item["id"] for item in list_members(db_session, invitation.household_id)] == [users["patient"]]


def test_accept_gives_up_after_max_attempts(db_session, users, monkeypatch):
    invitation = create_invitation(db_session, users["admin"], users["patient"])

    def failing_add_member(db, household_id, patient_id):
        raise OperationalError("INSERT INTO household_members", {}, Exception("database is locked"))

    monkeypatch.setattr(invitation_service, "add_member", failing_add_member)
    monkeypatch.setattr(invitation_service.settings, "respond_max_attempts", 2)

    with pytest.raises(OperationalError):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")

    db_session.expire_all()
    assert db_session.get(Invitation, invitation.id).status == InvitationStatusEnum.pending
    assert not is_member(db_session, invitation.household_id, users["patient"])


def test_concurrent_invite_for_same_pair_maps_to_duplicate_pending(db_session, users, monkeypatch):
    create_invitation(db_session, users["admin"], users["patient"])
    # The up-front check misses a pending row written by a concurrent request.
    monkeypatch.setattr(invitation_service, "get_pending_invitation", lambda db, admin_id, patient_id: None)

    with pytest.raises(DuplicatePending):
        create_invitation(db_session, users["admin"], users["patient"])
    assert _invitation_count(db_session) == 1


def test_response_loses_to_concurrent_resolution(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    stale = db_session.get(Invitation, invitation.id)
    assert stale.status == InvitationStatusEnum.pending

    other = TestingSessionLocal()
    try:
        respond_to_invitation(other, invitation.id, as_patient(users["patient"]), "accept")
    finally:
        other.close()

    with pytest.raises(NotPending):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "reject")

    db_session.expire_all()
    assert db_session.get(Invitation, invitation.id).status == InvitationStatusEnum.accepted
    members = db_session.execute(
        select(func.count(HouseholdMember.id)).where(HouseholdMember.patient_id == users["patient"])
    ).scalar_one()
    assert members == 1


def test_accept_loses_to_concurrent_reject(db_session, users):
    invitation = create_invitation(db_session, users["admin"], users["patient"])
    db_session.get(Invitation, invitation.id)

    other = TestingSessionLocal()
    try:
        respond_to_invitation(other, invitation.id, as_patient(users["patient"]), "reject")
    finally:
        other.close()

    with pytest.raises(NotPending):
        respond_to_invitation(db_session, invitation.id, as_patient(users["patient"]), "accept")
    assert not is_member(db_session, invitation.household_id, users["patient"])
