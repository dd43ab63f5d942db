"""Simulation runner for the scholarship contract."""

import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from scholarship.config import build_scholarship_config, get_config_with_args
from scholarship.controller import Scholarship
from scholarship.exceptions import ScholarshipError
from scholarship.primer import Primer, RoundPlan
from scholarship.simlog import (
    EventType,
    LogEntry,
    LogLevel,
    PhaseType,
    generate_run_id,
    log_event,
    logger,
    save_state_snapshot,
    setup_logging,
)
from scholarship.treasury import AccountLedger
from scholarship.utils import ManualClock, format_units, to_units


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scholarship Round Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--run-id",
        type=str,
        help="Custom run ID (default: auto-generated yymmddHH-N)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG, etc.)",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Quiet mode: suppress verbose logging, show only summary",
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Configuration file path (default: config.yaml)",
    )

    parser.add_argument(
        "--rounds",
        type=int,
        default=None,
        help="Number of rounds to play (default: from config file)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for round plan generation (default: from config file)",
    )

    parser.add_argument(
        "--num-applicants",
        type=int,
        default=None,
        help="Applicants per round (default: from config file)",
    )

    parser.add_argument(
        "--enforce-durations",
        action="store_true",
        help="Enforce application and voting durations",
    )

    parser.add_argument(
        "--db-dir",
        type=str,
        default=None,
        help="Directory for the forensic SQLite database (default: ./db)",
    )

    return parser.parse_args(argv)


def play_round(contract: Scholarship, plan: RoundPlan, clock: ManualClock) -> str:
    """Drive one round through all phases and return the winner."""
    committee = sorted(contract.config.committee)
    admin = committee[0]

    for account, uri in plan.applicants.items():
        contract.apply_for(account, uri)

    for donor, amount in plan.donations:
        contract.donate(donor, amount)

    clock.advance(contract.application_duration)
    contract.start_voting(admin)

    for member, application_id in plan.votes.items():
        contract.vote(member, application_id)

    clock.advance(contract.voting_duration)
    winner = contract.select_winner(admin)
    save_state_snapshot(contract.state.serialize_for_snapshot())
    return winner


def print_summary(console: Console, contract: Scholarship, ledger: AccountLedger):
    table = Table(title="Scholarship Rounds")
    table.add_column("Round", justify="right")
    table.add_column("Applications", justify="right")
    table.add_column("Votes", justify="right")
    table.add_column("Winner")
    table.add_column("Payout", justify="right")

    summary = contract.summarize()
    for row in summary["rounds"]:
        table.add_row(
            str(row["round"]),
            str(row["applications"]),
            str(row["votes"]),
            row["winner"] or "-",
            format_units(row["payout"]),
        )
    console.print(table)
    console.print(f"Treasury: {format_units(summary['treasury'])}")
    console.print(f"Total paid out: {format_units(sum(ledger.balances.values()))}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main simulation runner."""
    args = parse_arguments(argv)
    config = get_config_with_args(args.config, args)

    db_dir = Path(args.db_dir) if args.db_dir else None
    run_id = args.run_id if args.run_id else generate_run_id(db_dir)
    effective_verbosity = -1 if args.quiet else args.verbose
    run_logger = setup_logging(run_id, effective_verbosity, db_dir)

    try:
        scholarship_config = build_scholarship_config(config.get("scholarship", {}))
        simulation = config.get("simulation", {})
        rounds = simulation.get("rounds", 1)
        seed = simulation.get("seed", 42)
        num_applicants = simulation.get("num_applicants", 3)
        num_donors = simulation.get("num_donors", 2)
        max_donation = to_units(simulation.get("max_donation", "1"))

        log_event(
            LogEntry(
                phase=PhaseType.INIT,
                event_type=EventType.SIMULATION_START,
                payload={
                    "run_id": run_id,
                    "rounds": rounds,
                    "seed": seed,
                    "num_applicants": num_applicants,
                    "config_file": args.config,
                },
                message="Simulation parameters configured",
            )
        )

        clock = ManualClock()
        ledger = AccountLedger()
        contract = Scholarship(scholarship_config, clock=clock, ledger=ledger)
        primer = Primer(scholarship_config)

        for number in range(1, rounds + 1):
            plan = primer.generate_round_plan(
                seed=seed,
                round_number=number,
                num_applicants=num_applicants,
                num_donors=num_donors,
                max_donation=max_donation,
            )
            winner = play_round(contract, plan, clock)
            logger.info(f"Round {number} paid out to {winner}")
            if number < rounds:
                contract.start_next_round(sorted(scholarship_config.committee)[0])

        print_summary(run_logger.console, contract, ledger)

        log_event(
            LogEntry(
                phase=PhaseType.INIT,
                event_type=EventType.SIMULATION_COMPLETE,
                payload={"run_id": run_id, "rounds_completed": rounds},
                message="Simulation completed successfully",
            )
        )
        return 0

    except ScholarshipError as exc:
        log_event(
            LogEntry(
                phase=PhaseType.INIT,
                event_type=EventType.SIMULATION_ERROR,
                payload={"run_id": run_id, "error": exc.reason, **exc.details},
                message=f"Simulation failed: {exc.reason}",
                level=LogLevel.ERROR,
            )
        )
        return 1
    finally:
        run_logger.close()


if __name__ == "__main__":
    raise SystemExit(main())
