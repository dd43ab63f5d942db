import pytest

from scholarship import InvalidAmount, to_units
from scholarship.simlog import EventType

from conftest import COMMITTEE_1, DONOR, SEED


@pytest.mark.parametrize("amount", [0, -5, 0.5, "1", True, None])
def test_invalid_donation_fails(scholarship, amount):
    before = scholarship.state.model_dump()
    with pytest.raises(InvalidAmount) as excinfo:
        scholarship.donate(DONOR, amount)
    assert excinfo.value.reason == "Donation must be > 0"
    assert scholarship.treasury_balance() == SEED
    assert scholarship.state.model_dump() == before


def test_donation_increases_treasury(scholarship):
    amount = to_units("1")
    scholarship.donate(DONOR, amount)

    assert scholarship.treasury_balance() == to_units("1.01")
    notification = scholarship.notifications[-1]
    assert notification.event == EventType.DONATED
    assert notification.args == {"donor": DONOR, "amount": amount}


def test_donations_accumulate_across_phases(voting):
    voting.donate(DONOR, 5)
    voting.vote(COMMITTEE_1, 1)
    voting.select_winner(COMMITTEE_1)
    voting.donate(DONOR, 7)
    assert voting.treasury_balance() == 7

    voting.start_next_round(COMMITTEE_1)
    voting.donate(COMMITTEE_1, 3)
    assert voting.treasury_balance() == 10


@pytest.mark.parametrize("amounts", [[1], [1, 2, 3], [to_units("0.5"), to_units("2.25")]])
def test_each_donation_adds_exactly_its_value(scholarship, amounts):
    for amount in amounts:
        before = scholarship.treasury_balance()
        scholarship.donate(DONOR, amount)
        assert scholarship.treasury_balance() == before + amount


def test_treasury_stays_integral_after_rejected_fraction(scholarship):
    with pytest.raises(InvalidAmount):
        scholarship.donate(DONOR, 0.5)
    scholarship.donate(DONOR, 3)

    assert scholarship.treasury_balance() == SEED + 3
    assert isinstance(scholarship.treasury_balance(), int)
