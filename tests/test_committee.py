import pytest

from scholarship import AlreadyMember, InvalidConfig, Unauthorized
from scholarship.simlog import EventType

from conftest import COMMITTEE_1, COMMITTEE_2, EXTRA_COMMITTEE


def test_non_committee_cannot_add_members(scholarship):
    with pytest.raises(Unauthorized) as excinfo:
        scholarship.add_committee_member(EXTRA_COMMITTEE, EXTRA_COMMITTEE)
    assert excinfo.value.reason == "Only committee can add members"
    assert not scholarship.is_committee(EXTRA_COMMITTEE)
    assert scholarship.committee_count() == 2


def test_committee_member_can_add_new_member(scholarship):
    scholarship.add_committee_member(COMMITTEE_1, EXTRA_COMMITTEE)

    assert scholarship.is_committee(EXTRA_COMMITTEE)
    assert scholarship.committee_count() == 3

    notification = scholarship.notifications[-1]
    assert notification.event == EventType.COMMITTEE_MEMBER_ADDED
    assert notification.args == {"account": EXTRA_COMMITTEE}


def test_adding_existing_member_fails(scholarship):
    with pytest.raises(AlreadyMember):
        scholarship.add_committee_member(COMMITTEE_1, COMMITTEE_2)
    assert scholarship.committee_count() == 2
    assert scholarship.notifications == []


def test_adding_blank_account_fails(scholarship):
    with pytest.raises(InvalidConfig):
        scholarship.add_committee_member(COMMITTEE_1, "")


def test_new_member_can_administer_rounds(scholarship):
    scholarship.add_committee_member(COMMITTEE_1, EXTRA_COMMITTEE)
    scholarship.add_committee_member(EXTRA_COMMITTEE, "0x" + "f" * 40)
    assert scholarship.committee_count() == 4

    scholarship.start_voting(EXTRA_COMMITTEE)
    assert scholarship.get_round_info().phase.name == "VOTING"


def test_members_can_be_added_in_any_phase(voting):
    voting.add_committee_member(COMMITTEE_2, EXTRA_COMMITTEE)
    voting.vote(EXTRA_COMMITTEE, 1)
    assert voting.get_application(1, 1).vote_count == 1


def test_member_added_event_records_caller_and_new_member(scholarship, logged_events):
    scholarship.add_committee_member(COMMITTEE_1, EXTRA_COMMITTEE)

    added = [e for e in logged_events if e["event_type"] == "committee_member_added"]
    assert len(added) == 1
    assert added[0]["account"] == COMMITTEE_1
    assert added[0]["payload"] == {"account": EXTRA_COMMITTEE}
