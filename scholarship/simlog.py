"""
Scholarship Logging Infrastructure

Provides structured logging with forensic SQLite capture and rich console output.
The contract only ever calls log_event/logger; sinks are installed by the runner.
"""

import sqlite3
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from pydantic import BaseModel
from loguru import logger
from rich.console import Console
from rich.logging import RichHandler


class EventType(str, Enum):
    """Event types for structured logging"""

    # Deployment
    CONTRACT_DEPLOYED = "contract_deployed"

    # Committee
    COMMITTEE_MEMBER_ADDED = "committee_member_added"

    # Round Lifecycle
    VOTING_STARTED = "voting_started"
    WINNER_SELECTED = "winner_selected"
    NEW_ROUND_STARTED = "new_round_started"
    PHASE_TRANSITION = "phase_transition"

    # Applications & Votes
    APPLICATION_SUBMITTED = "application_submitted"
    VOTE_CAST = "vote_cast"

    # Treasury
    DONATED = "donated"
    TREASURY_CREDITED = "treasury_credited"
    PAYOUT_TRANSFERRED = "payout_transferred"
    PAYOUT_FAILED = "payout_failed"

    # Rejections
    CALL_REJECTED = "call_rejected"

    # Simulation Lifecycle
    SIMULATION_START = "simulation_start"
    SIMULATION_COMPLETE = "simulation_complete"
    SIMULATION_ERROR = "simulation_error"

    # State Snapshots
    STATE_SNAPSHOT = "state_snapshot"


class PhaseType(str, Enum):
    """Phase names as they appear in logs"""

    INIT = "INIT"
    APPLICATIONS = "APPLICATIONS"
    VOTING = "VOTING"
    CLOSED = "CLOSED"


class LogLevel(str, Enum):
    """Log levels for structured logging"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogEntry(BaseModel):
    """Structured log entry with full type safety"""

    round: Optional[int] = None
    phase: Optional[PhaseType] = None
    event_type: EventType
    account: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    message: str
    level: LogLevel = LogLevel.INFO


class SQLiteSink:
    """Custom loguru sink for SQLite event storage."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(str(db_path))
        self._init_tables()

    def _init_tables(self):
        """Initialize the events and snapshot tables."""
        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS events (
                id INTEGER PRIMARY KEY,
                round INTEGER,
                phase TEXT,
                account TEXT,
                event_type TEXT,
                message TEXT,
                payload TEXT
            )
        """
        )

        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS state_snapshots (
                id INTEGER PRIMARY KEY,
                round INTEGER NOT NULL,
                phase TEXT,
                started_at INTEGER,
                treasury INTEGER,
                committee TEXT,
                applications TEXT,
                voters TEXT,
                winner TEXT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """
        )
        self.connection.commit()

    def write(self, message):
        """Write a log record to SQLite."""
        record = message.record
        event_dict = record.get("extra", {}).get("event_dict", {})

        self.connection.execute(
            """
            INSERT INTO events (round, phase, account, event_type, message, payload)
            VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                event_dict.get("round"),
                event_dict.get("phase"),
                event_dict.get("account"),
                event_dict.get("event_type"),
                record["message"],
                (
                    json.dumps(event_dict.get("payload"))
                    if event_dict.get("payload")
                    else None
                ),
            ),
        )
        self.connection.commit()

    def save_state_snapshot(self, state_data: dict):
        """Save a complete state snapshot to the database."""
        self.connection.execute(
            """
            INSERT INTO state_snapshots (
                round, phase, started_at, treasury, committee,
                applications, voters, winner
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                state_data["round"],
                state_data["phase"],
                state_data["started_at"],
                state_data["treasury"],
                state_data["committee"],
                state_data["applications"],
                state_data["voters"],
                state_data["winner"],
            ),
        )
        self.connection.commit()

    def close(self):
        """Close the SQLite connection."""
        if self.connection:
            self.connection.close()


class ScholarshipLogger:
    """Main logging coordinator for a scholarship run."""

    def __init__(self, run_id: str, verbosity: int, db_dir: Optional[Path] = None):
        self.run_id = run_id
        self.verbosity = verbosity
        self.db_path = (db_dir or Path.cwd() / "db") / f"{run_id}.sqlite3"
        self.sqlite_sink: Optional[SQLiteSink] = None
        self.console = Console()
        self.handler_ids: List[int] = []

        self._setup_logging()

    def _add_forensic_symbol(self, record):
        """Add forensic symbol to record extra data."""
        is_forensic = "event_dict" in record["extra"]
        record["extra"]["symbol"] = "🔬" if is_forensic else "💬"
        return True

    def _setup_logging(self):
        """Configure loguru with rich console and SQLite sinks."""
        logger.remove()

        log_level = self._get_log_level()
        self.handler_ids.append(logger.add(
            RichHandler(console=self.console, rich_tracebacks=True),
            level=log_level,
            format="{time:HH:mm:ss} | {level: <8} | {extra[symbol]} {message}",
            filter=self._add_forensic_symbol,
        ))

        self.sqlite_sink = SQLiteSink(self.db_path)
        self.handler_ids.append(logger.add(
            self.sqlite_sink.write,
            level="DEBUG",
            format="{message}",
            filter=lambda record: "event_dict" in record["extra"],
        ))

        logger.info(f"Scholarship logging initialized: {self.run_id}")
        logger.info(f"Database: {self.db_path}")
        logger.info(f"Console verbosity: {log_level}")

    def _get_log_level(self) -> str:
        """Map verbosity level to loguru level."""
        level_map = {
            -1: "ERROR",  # Quiet mode
            0: "WARNING",
            1: "INFO",
            2: "DEBUG",
            3: "TRACE",
        }
        return level_map.get(self.verbosity, "INFO")

    def close(self):
        """Clean shutdown of logging infrastructure."""
        logger.info(f"Scholarship logging closed: {self.run_id}")
        for handler_id in self.handler_ids:
            logger.remove(handler_id)
        self.handler_ids.clear()
        if self.sqlite_sink:
            self.sqlite_sink.close()
            self.sqlite_sink = None


def setup_logging(
    run_id: str, verbosity: int, db_dir: Optional[Path] = None
) -> ScholarshipLogger:
    """
    Initialize structured logging for a run.

    Args:
        run_id: Unique run identifier
        verbosity: Console verbosity level (-1 to 3)
        db_dir: Directory for the forensic database (default: ./db)

    Returns:
        ScholarshipLogger instance for cleanup
    """
    global _current_logger
    _current_logger = ScholarshipLogger(run_id, verbosity, db_dir)
    return _current_logger


def generate_run_id(db_dir: Optional[Path] = None) -> str:
    """
    Generate a unique run ID in yymmddHH-N format.

    Returns:
        Unique run ID string
    """
    base_id = datetime.now().strftime("%y%m%d%H")

    db_dir = db_dir or Path.cwd() / "db"
    if not db_dir.exists():
        return f"{base_id}-1"

    suffixes = []
    for file in db_dir.glob(f"{base_id}-*.sqlite3"):
        try:
            suffixes.append(int(file.stem.split("-")[1]))
        except (IndexError, ValueError):
            continue

    next_suffix = max(suffixes) + 1 if suffixes else 1
    return f"{base_id}-{next_suffix}"


_current_logger: Optional[ScholarshipLogger] = None


def log_event(entry: LogEntry, forensic: bool = True):
    """
    Log a structured event with type safety and forensic capture.

    Args:
        entry: LogEntry with structured event data
        forensic: If True, captures to SQLite database (default: True)
    """
    level = entry.level.value
    if forensic:
        logger.opt(depth=1).bind(
            event_dict={
                "round": entry.round,
                "phase": entry.phase.value if entry.phase else None,
                "event_type": entry.event_type.value,
                "account": entry.account,
                "payload": entry.payload,
            }
        ).log(level, entry.message)
    else:
        logger.opt(depth=1).log(level, entry.message)


def save_state_snapshot(state_data: dict):
    """Save a state snapshot using the current logger, if one is installed."""
    if _current_logger and _current_logger.sqlite_sink:
        _current_logger.sqlite_sink.save_state_snapshot(state_data)
        log_event(
            LogEntry(
                round=state_data.get("round"),
                event_type=EventType.STATE_SNAPSHOT,
                payload={"phase": state_data.get("phase"), "treasury": state_data.get("treasury")},
                message=f"State snapshot saved for round {state_data.get('round')}",
                level=LogLevel.DEBUG,
            ),
            forensic=False,
        )
