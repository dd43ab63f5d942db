import pytest

from scholarship import DuplicateVote, InvalidPhase, Unauthorized, UnknownApplication
from scholarship.simlog import EventType

from conftest import APPLICANT, COMMITTEE_1, COMMITTEE_2, EXTRA_COMMITTEE


def test_committee_votes_are_counted(voting):
    voting.vote(COMMITTEE_1, 1)
    voting.vote(COMMITTEE_2, 1)

    assert voting.get_application(1, 1).vote_count == 2
    assert voting.get_application(1, 2).vote_count == 0
    assert voting.has_voted(COMMITTEE_1)
    assert voting.has_voted(COMMITTEE_2)

    notification = voting.notifications[-1]
    assert notification.event == EventType.VOTE_CAST
    assert notification.args == {"round": 1, "id": 1, "voter": COMMITTEE_2}


def test_non_committee_cannot_vote(voting):
    with pytest.raises(Unauthorized):
        voting.vote(APPLICANT, 1)
    assert voting.get_application(1, 1).vote_count == 0


def test_vote_outside_voting_phase_fails(scholarship):
    scholarship.apply_for(APPLICANT, "ipfs://a")
    with pytest.raises(InvalidPhase):
        scholarship.vote(COMMITTEE_1, 1)
    assert not scholarship.has_voted(COMMITTEE_1)


def test_vote_on_unknown_application_changes_nothing(voting):
    before = voting.state.model_dump()
    with pytest.raises(UnknownApplication):
        voting.vote(COMMITTEE_1, 3)
    assert voting.state.model_dump() == before
    assert [app.vote_count for app in voting.get_applications(1)] == [0, 0]
    assert not voting.has_voted(COMMITTEE_1)


def test_one_vote_per_member_per_round(voting):
    voting.vote(COMMITTEE_1, 1)
    with pytest.raises(DuplicateVote):
        voting.vote(COMMITTEE_1, 2)
    assert voting.get_application(1, 1).vote_count == 1
    assert voting.get_application(1, 2).vote_count == 0


def test_vote_total_matches_distinct_voters(voting):
    voting.add_committee_member(COMMITTEE_1, EXTRA_COMMITTEE)
    attempts = [
        (COMMITTEE_1, 1),
        (COMMITTEE_1, 2),
        (COMMITTEE_2, 2),
        (EXTRA_COMMITTEE, 9),
        (EXTRA_COMMITTEE, 2),
        (APPLICANT, 1),
    ]
    for member, application_id in attempts:
        try:
            voting.vote(member, application_id)
        except (DuplicateVote, UnknownApplication, Unauthorized):
            pass

    total = sum(app.vote_count for app in voting.get_applications(1))
    voters = [m for m in (COMMITTEE_1, COMMITTEE_2, EXTRA_COMMITTEE) if voting.has_voted(m)]
    assert total == len(voters) == 3
    assert voting.get_application(1, 2).vote_count == 2
