import pytest
from loguru import logger

from scholarship import AccountLedger, ManualClock, Scholarship, ScholarshipConfig, to_units

COMMITTEE_1 = "0x1111111111111111111111111111111111111111"
COMMITTEE_2 = "0x2222222222222222222222222222222222222222"
APPLICANT = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
APPLICANT_2 = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
DONOR = "0xdddddddddddddddddddddddddddddddddddddddd"
EXTRA_COMMITTEE = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

SEED = to_units("0.01")


@pytest.fixture
def clock():
    return ManualClock(start=1_000_000)


@pytest.fixture
def ledger():
    return AccountLedger()


@pytest.fixture
def config():
    return ScholarshipConfig(committee=[COMMITTEE_1, COMMITTEE_2], seed_amount=SEED)


@pytest.fixture
def scholarship(config, clock, ledger):
    return Scholarship(config, clock=clock, ledger=ledger)


@pytest.fixture
def voting(scholarship):
    """Scholarship with two applications, in the VOTING phase."""
    scholarship.apply_for(APPLICANT, "ipfs://first-app")
    scholarship.apply_for(APPLICANT_2, "ipfs://second-app")
    scholarship.start_voting(COMMITTEE_1)
    return scholarship


@pytest.fixture
def logged_events():
    """Forensic event dicts written to the log while the test runs."""
    events = []
    handler_id = logger.add(
        lambda message: events.append(message.record["extra"]["event_dict"]),
        level="DEBUG",
        filter=lambda record: "event_dict" in record["extra"],
    )
    yield events
    logger.remove(handler_id)
