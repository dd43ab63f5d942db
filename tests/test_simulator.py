import sqlite3

import pytest
import yaml

from scholarship import ScholarshipConfig
from scholarship.primer import Primer
from scholarship.simulator import main


@pytest.fixture
def sim_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "scholarship": {
                    "committee": ["0xc1", "0xc2", "0xc3"],
                    "seed_amount": "0.01",
                    "application_duration": 60,
                    "voting_duration": 30,
                },
                "simulation": {
                    "rounds": 2,
                    "seed": 3,
                    "num_applicants": 4,
                    "num_donors": 2,
                    "max_donation": "1",
                },
            }
        )
    )
    return path


def test_primer_is_deterministic():
    config = ScholarshipConfig(committee=["0xc1", "0xc2"], seed_amount=1)
    primer = Primer(config)
    first = primer.generate_round_plan(seed=1, round_number=2, num_applicants=3, num_donors=2, max_donation=10)
    second = primer.generate_round_plan(seed=1, round_number=2, num_applicants=3, num_donors=2, max_donation=10)

    assert first == second
    assert len(first.applicants) == 3
    assert len(first.donations) == 2
    assert set(first.votes) == {"0xc1", "0xc2"}
    assert all(1 <= application_id <= 3 for application_id in first.votes.values())


def test_simulation_runs_rounds_and_records_events(sim_config, tmp_path):
    db_dir = tmp_path / "db"
    exit_code = main(
        [
            "--config", str(sim_config),
            "--db-dir", str(db_dir),
            "--run-id", "test-1",
            "--enforce-durations",
            "-q",
        ]
    )
    assert exit_code == 0

    connection = sqlite3.connect(str(db_dir / "test-1.sqlite3"))
    try:
        events = [row[0] for row in connection.execute("SELECT event_type FROM events")]
        snapshots = connection.execute("SELECT round, phase, treasury FROM state_snapshots").fetchall()
    finally:
        connection.close()

    assert events.count("winner_selected") == 2
    assert events.count("new_round_started") == 1
    assert "simulation_complete" in events
    assert snapshots == [(1, "CLOSED", 0), (2, "CLOSED", 0)]


def test_simulation_without_applicants_fails_cleanly(sim_config, tmp_path):
    exit_code = main(
        [
            "--config", str(sim_config),
            "--db-dir", str(tmp_path / "db"),
            "--run-id", "test-2",
            "--num-applicants", "0",
            "-q",
        ]
    )
    assert exit_code == 1
