"""Core data models for the scholarship contract."""
import json
from enum import IntEnum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from scholarship.simlog import EventType, PhaseType


class Phase(IntEnum):
    """Round phases. Integer values follow the on-chain ordinal encoding."""

    APPLICATIONS = 0
    VOTING = 1
    CLOSED = 2

    @property
    def log_type(self) -> PhaseType:
        return PhaseType(self.name)


class Application(BaseModel):
    """A submission competing for the round's payout."""

    id: int = Field(ge=1)  # Sequential within its round
    round: int = Field(ge=1)
    applicant: str
    metadata_uri: str
    vote_count: int = Field(default=0, ge=0)
    submitted_at: int


class Round(BaseModel):
    """One cycle of application intake, voting and a single payout."""

    number: int = Field(ge=1)
    phase: Phase = Phase.APPLICATIONS
    started_at: int
    voting_started_at: Optional[int] = None
    winner: Optional[str] = None
    payout: int = Field(default=0, ge=0)

    @property
    def has_winner(self) -> bool:
        return self.winner is not None


class RoundInfo(BaseModel):
    """Point-in-time snapshot of the current round."""

    model_config = ConfigDict(frozen=True)

    round: int
    phase: Phase
    application_count: int
    started_at: int
    has_winner: bool
    winner: Optional[str] = None


class Notification(BaseModel):
    """An event emitted by a successful call."""

    model_config = ConfigDict(frozen=True)

    event: EventType
    round: int
    args: Dict[str, Any] = {}


class ScholarshipConfig(BaseModel):
    """Deployment parameters. Amounts are integer base units, durations seconds."""

    model_config = ConfigDict(frozen=True)

    committee: List[str]
    seed_amount: int
    application_duration: int = Field(default=7 * 24 * 3600, ge=0)
    voting_duration: int = Field(default=3 * 24 * 3600, ge=0)
    enforce_durations: bool = False


class ScholarshipState(BaseModel):
    """Mutable state of one scholarship instance."""

    # Committee registry
    committee: Set[str] = set()

    # Round ledger
    current_round: int = 1
    rounds: Dict[int, Round] = {}

    # Application book and vote tally, keyed by round number
    applications: Dict[int, List[Application]] = {}
    applicants: Dict[int, Set[str]] = {}
    voters: Dict[int, Set[str]] = {}

    # Treasury
    treasury: int = Field(default=0, ge=0)

    # Emitted events
    notifications: List[Notification] = []

    @property
    def round(self) -> Round:
        return self.rounds[self.current_round]

    @property
    def book(self) -> List[Application]:
        """Applications of the current round, in submission order."""
        return self.applications.get(self.current_round, [])

    def open_round(self, number: int, started_at: int) -> Round:
        """Create an empty round in the APPLICATIONS phase and make it current."""
        self.rounds[number] = Round(number=number, started_at=started_at)
        self.applications[number] = []
        self.applicants[number] = set()
        self.voters[number] = set()
        self.current_round = number
        return self.rounds[number]

    def checkpoint(self) -> Dict[str, Any]:
        """Copy of everything a single call can change.

        Closed rounds are never written again and notifications only grow at
        commit, so only the current round's records are copied.
        """
        number = self.current_round
        return {
            "current_round": number,
            "committee": set(self.committee),
            "treasury": self.treasury,
            "round": self.rounds[number].model_copy(),
            "book": [app.model_copy() for app in self.applications.get(number, [])],
            "applicants": set(self.applicants.get(number, set())),
            "voters": set(self.voters.get(number, set())),
        }

    def rollback(self, checkpoint: Dict[str, Any]) -> None:
        """Undo every change made since checkpoint() was taken, in place."""
        number = checkpoint["current_round"]
        for later in [n for n in self.rounds if n > number]:
            del self.rounds[later]
            self.applications.pop(later, None)
            self.applicants.pop(later, None)
            self.voters.pop(later, None)

        self.current_round = number
        self.committee = checkpoint["committee"]
        self.treasury = checkpoint["treasury"]
        self.rounds[number] = checkpoint["round"]
        self.applications[number] = checkpoint["book"]
        self.applicants[number] = checkpoint["applicants"]
        self.voters[number] = checkpoint["voters"]

    def find_application(self, round_number: int, application_id: int) -> Optional[Application]:
        for app in self.applications.get(round_number, []):
            if app.id == application_id:
                return app
        return None

    def serialize_for_snapshot(self) -> dict:
        """Serialize state for database snapshot storage."""
        current = self.round
        return {
            "round": current.number,
            "phase": current.phase.name,
            "started_at": current.started_at,
            "treasury": self.treasury,
            "committee": json.dumps(sorted(self.committee)),
            "applications": json.dumps([app.model_dump() for app in self.book]),
            "voters": json.dumps(sorted(self.voters.get(current.number, set()))),
            "winner": current.winner,
        }
