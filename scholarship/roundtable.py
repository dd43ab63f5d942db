from typing import Dict, List, Optional

from scholarship.exceptions import InvalidPhase
from scholarship.models import Phase, Round, ScholarshipConfig, ScholarshipState
from scholarship.simlog import EventType, LogEntry, LogLevel


class RoundPhase:
    def __init__(self, phase: Phase, next_phase: Phase):
        self.phase = phase
        self.next_phase = next_phase

    def ready_at(self, round_: Round, config: ScholarshipConfig) -> Optional[int]:
        """Earliest time the round may leave this phase, or None if ungated."""
        return None

    def check_elapsed(self, round_: Round, config: ScholarshipConfig, now: int) -> None:
        if not config.enforce_durations:
            return
        ready_at = self.ready_at(round_, config)
        if ready_at is not None and now < ready_at:
            raise InvalidPhase(
                f"{self.phase.name.capitalize()} period not over",
                {"now": now, "ready_at": ready_at, "round": round_.number},
            )

    def enter(self, state: ScholarshipState, now: int) -> Round:
        """Apply the move into this phase and return the round it applies to."""
        round_ = state.round
        round_.phase = self.phase
        return round_

    def transition_entry(self, round_: Round, previous: Phase, now: int) -> LogEntry:
        return LogEntry(
            round=round_.number,
            phase=self.phase.log_type,
            event_type=EventType.PHASE_TRANSITION,
            payload={
                "from": previous.name,
                "to": self.phase.name,
                "at": now,
            },
            message=f"Round {round_.number}: {previous.name} -> {self.phase.name}",
            level=LogLevel.DEBUG,
        )


class ApplicationsPhase(RoundPhase):
    def __init__(self):
        super().__init__(Phase.APPLICATIONS, Phase.VOTING)

    def ready_at(self, round_: Round, config: ScholarshipConfig) -> Optional[int]:
        return round_.started_at + config.application_duration

    def enter(self, state: ScholarshipState, now: int) -> Round:
        """Open the next round with an empty book and tally."""
        return state.open_round(state.current_round + 1, started_at=now)


class VotingPhase(RoundPhase):
    def __init__(self):
        super().__init__(Phase.VOTING, Phase.CLOSED)

    def ready_at(self, round_: Round, config: ScholarshipConfig) -> Optional[int]:
        return round_.voting_started_at + config.voting_duration

    def enter(self, state: ScholarshipState, now: int) -> Round:
        round_ = super().enter(state, now)
        round_.voting_started_at = now
        state.voters[round_.number] = set()
        return round_


class ClosedPhase(RoundPhase):
    def __init__(self):
        super().__init__(Phase.CLOSED, Phase.APPLICATIONS)


PHASES: Dict[Phase, RoundPhase] = {
    Phase.APPLICATIONS: ApplicationsPhase(),
    Phase.VOTING: VotingPhase(),
    Phase.CLOSED: ClosedPhase(),
}


class RoundLifecycle:
    """Forward-only phase machine: APPLICATIONS -> VOTING -> CLOSED -> next round."""

    def __init__(self, state: ScholarshipState, config: ScholarshipConfig, clock, journal: Optional[List[LogEntry]] = None):
        self.state = state
        self.config = config
        self.clock = clock
        # Transition log entries awaiting the owning call's commit
        self.journal: List[LogEntry] = journal if journal is not None else []

    def start(self) -> Round:
        """Open round 1 at deployment."""
        return self.state.open_round(1, started_at=self.clock.now())

    @property
    def current_phase(self) -> Phase:
        return self.state.round.phase

    def require(self, phase: Phase, reason: Optional[str] = None) -> None:
        if self.current_phase != phase:
            raise InvalidPhase(
                reason or f"Not in {phase.name} phase",
                {"expected": phase.name, "actual": self.current_phase.name},
            )

    def advance(self, target: Phase) -> Round:
        """Move to target, which must be the successor of the current phase."""
        current = PHASES[self.current_phase]
        if current.next_phase != target:
            raise InvalidPhase(
                f"Cannot move from {current.phase.name} to {target.name}",
                {"expected": current.next_phase.name, "requested": target.name},
            )

        now = self.clock.now()
        current.check_elapsed(self.state.round, self.config, now)

        nxt = PHASES[target]
        round_ = nxt.enter(self.state, now)
        self.journal.append(nxt.transition_entry(round_, current.phase, now))
        return round_
