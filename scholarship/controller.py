"""Controller owning the scholarship state and exposing every public call."""

from contextlib import contextmanager
from typing import List, Optional

from scholarship.committee import CommitteeRegistry
from scholarship.exceptions import (
    DuplicateApplication,
    DuplicateVote,
    Forbidden,
    InvalidConfig,
    NoApplications,
    ReentrantCall,
    ScholarshipError,
    Unauthorized,
    UnknownApplication,
    UnknownRound,
)
from scholarship.models import (
    Application,
    Notification,
    Phase,
    Round,
    RoundInfo,
    ScholarshipConfig,
    ScholarshipState,
)
from scholarship.roundtable import RoundLifecycle
from scholarship.simlog import EventType, LogEntry, LogLevel, PhaseType, log_event, logger
from scholarship.treasury import AccountLedger, Treasury
from scholarship.utils import SystemClock


class Scholarship:
    """Recurring scholarship award run by a committee.

    Every mutating call takes the calling account as its first argument and
    either applies fully or raises a ScholarshipError with the state untouched.
    """

    def __init__(
        self,
        config: ScholarshipConfig,
        clock=None,
        ledger: Optional[AccountLedger] = None,
        deployer: str = "deployer",
    ):
        self.config = config
        self.clock = clock or SystemClock()
        self.ledger = ledger or AccountLedger()
        self.state = ScholarshipState()

        self.committee = CommitteeRegistry(self.state)
        self.treasury = Treasury(self.state, self.ledger)
        self._pending: List[Notification] = []
        self._journal: List[LogEntry] = []
        self.lifecycle = RoundLifecycle(self.state, self.config, self.clock, self._journal)

        self._transferring = False

        if config.seed_amount <= 0:
            raise InvalidConfig("Seed funding must be > 0", {"seed_amount": config.seed_amount})
        self.committee.seed(config.committee)
        self.lifecycle.start()
        self.treasury.deposit(deployer, config.seed_amount, "Deployment seed")

        log_event(LogEntry(
            round=self.state.current_round,
            phase=PhaseType.INIT,
            event_type=EventType.CONTRACT_DEPLOYED,
            account=deployer,
            payload={
                "committee": sorted(self.state.committee),
                "seed_amount": config.seed_amount,
                "application_duration": config.application_duration,
                "voting_duration": config.voting_duration,
                "enforce_durations": config.enforce_durations,
            },
            message=f"Scholarship deployed with {self.committee.count()} committee members",
        ))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str, caller: str):
        """Run a mutating call atomically.

        On failure the state is rolled back and buffered notifications and log
        entries are dropped. On success both are published.
        """
        if self._transferring:
            self._log_call_rejection(caller, operation, ReentrantCall())
            raise ReentrantCall(details={"operation": operation})

        checkpoint = self.state.checkpoint()
        try:
            yield
        except ScholarshipError as exc:
            self._discard(checkpoint)
            self._log_call_rejection(caller, operation, exc)
            raise
        except Exception:
            self._discard(checkpoint)
            logger.exception(f"{operation} from {caller} failed unexpectedly, state restored")
            raise

        self.state.notifications.extend(self._pending)
        self._pending.clear()
        for entry in self._journal:
            log_event(entry)
        self._journal.clear()

    def _discard(self, checkpoint: dict):
        self.state.rollback(checkpoint)
        self._pending.clear()
        self._journal.clear()

    def _emit(self, event: EventType, actor: Optional[str], message: str, **args):
        self._pending.append(Notification(event=event, round=self.state.current_round, args=args))
        self._journal.append(LogEntry(
            round=self.state.current_round,
            phase=self.lifecycle.current_phase.log_type,
            event_type=event,
            account=actor,
            payload=args,
            message=message,
        ))

    def _log_call_rejection(self, caller: str, operation: str, exc: ScholarshipError):
        """Log call rejection with consistent format."""
        payload = {"reason": exc.reason, "error": type(exc).__name__}
        payload.update(exc.details)

        log_event(LogEntry(
            round=self.state.current_round,
            phase=self.lifecycle.current_phase.log_type,
            event_type=EventType.CALL_REJECTED,
            account=caller,
            payload=payload,
            message=f"Rejected {operation} from {caller}: {exc.reason}",
            level=LogLevel.WARNING,
        ))

    def _require_committee(self, caller: str, reason: Optional[str] = None):
        if not self.committee.is_member(caller):
            raise Unauthorized(reason, {"caller": caller})

    # ------------------------------------------------------------------
    # Committee registry
    # ------------------------------------------------------------------

    def is_committee(self, account: str) -> bool:
        return self.committee.is_member(account)

    def committee_count(self) -> int:
        return self.committee.count()

    def add_committee_member(self, caller: str, account: str):
        with self._transaction("add_committee_member", caller):
            self._require_committee(caller, "Only committee can add members")
            self.committee.add(account)
            self._emit(
                EventType.COMMITTEE_MEMBER_ADDED,
                caller,
                f"Committee member added by {caller}: {account}",
                account=account,
            )

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    def start_voting(self, caller: str):
        with self._transaction("start_voting", caller):
            self._require_committee(caller)
            self.lifecycle.require(Phase.APPLICATIONS, "Not accepting applications")
            round_ = self.lifecycle.advance(Phase.VOTING)
            self._emit(
                EventType.VOTING_STARTED,
                caller,
                f"Voting started for round {round_.number} with {len(self.state.book)} applications",
                round=round_.number,
            )

    def select_winner(self, caller: str) -> str:
        """Close the round and pay the whole treasury to the top-voted applicant."""
        with self._transaction("select_winner", caller):
            self._require_committee(caller)
            self.lifecycle.require(Phase.VOTING, "Voting is not open")
            if not self.state.book:
                raise NoApplications(details={"round": self.state.current_round})

            winning = self._top_application()
            round_ = self.lifecycle.advance(Phase.CLOSED)
            amount = self.treasury.drain()
            round_.winner = winning.applicant
            round_.payout = amount

            self._emit(
                EventType.WINNER_SELECTED,
                caller,
                f"Round {round_.number} winner: {winning.applicant} (application #{winning.id}, {winning.vote_count} votes)",
                round=round_.number,
                winner=winning.applicant,
                amount=amount,
            )

            # External transfer goes last, after all bookkeeping
            self._transferring = True
            try:
                self.treasury.pay(winning.applicant, amount)
            finally:
                self._transferring = False

        return winning.applicant

    def _top_application(self) -> Application:
        """Strictly highest vote count; ties go to the earliest submission."""
        best = self.state.book[0]
        for app in self.state.book[1:]:
            if app.vote_count > best.vote_count:
                best = app
        return best

    def start_next_round(self, caller: str) -> int:
        with self._transaction("start_next_round", caller):
            self._require_committee(caller)
            self.lifecycle.require(Phase.CLOSED, "Current round is not closed")
            round_ = self.lifecycle.advance(Phase.APPLICATIONS)
            self._emit(
                EventType.NEW_ROUND_STARTED,
                caller,
                f"Round {round_.number} started",
                round=round_.number,
            )
        return round_.number

    # ------------------------------------------------------------------
    # Applications and votes
    # ------------------------------------------------------------------

    def apply_for(self, caller: str, metadata_uri: str) -> int:
        with self._transaction("apply_for", caller):
            if self.committee.is_member(caller):
                raise Forbidden(details={"caller": caller})
            self.lifecycle.require(Phase.APPLICATIONS, "Applications are closed")

            number = self.state.current_round
            if caller in self.state.applicants[number]:
                raise DuplicateApplication(details={"caller": caller, "round": number})

            application = Application(
                id=len(self.state.book) + 1,
                round=number,
                applicant=caller,
                metadata_uri=metadata_uri,
                submitted_at=self.clock.now(),
            )
            self.state.applications[number].append(application)
            self.state.applicants[number].add(caller)

            self._emit(
                EventType.APPLICATION_SUBMITTED,
                caller,
                f"Application #{application.id} submitted by {caller} for round {number}",
                round=number,
                id=application.id,
                applicant=caller,
                metadata_uri=metadata_uri,
            )
        return application.id

    def vote(self, caller: str, application_id: int):
        with self._transaction("vote", caller):
            self._require_committee(caller)
            self.lifecycle.require(Phase.VOTING, "Voting is not open")

            number = self.state.current_round
            application = self.state.find_application(number, application_id)
            if application is None:
                raise UnknownApplication(details={"round": number, "id": application_id})
            if caller in self.state.voters[number]:
                raise DuplicateVote(details={"caller": caller, "round": number})

            application.vote_count += 1
            self.state.voters[number].add(caller)

            self._emit(
                EventType.VOTE_CAST,
                caller,
                f"{caller} voted for application #{application_id} (now {application.vote_count})",
                round=number,
                id=application_id,
                voter=caller,
            )

    def has_applied(self, account: str) -> bool:
        return account in self.state.applicants.get(self.state.current_round, set())

    def has_voted(self, account: str) -> bool:
        return account in self.state.voters.get(self.state.current_round, set())

    # ------------------------------------------------------------------
    # Treasury
    # ------------------------------------------------------------------

    def donate(self, caller: str, amount: int):
        with self._transaction("donate", caller):
            self.treasury.deposit(caller, amount, "Donation")
            self._emit(
                EventType.DONATED,
                caller,
                f"Donation from {caller}: {amount}",
                donor=caller,
                amount=amount,
            )

    def treasury_balance(self) -> int:
        return self.treasury.get_balance()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def application_duration(self) -> int:
        return self.config.application_duration

    @property
    def voting_duration(self) -> int:
        return self.config.voting_duration

    @property
    def notifications(self) -> List[Notification]:
        return list(self.state.notifications)

    def get_round_info(self) -> RoundInfo:
        round_ = self.state.round
        return RoundInfo(
            round=round_.number,
            phase=round_.phase,
            application_count=len(self.state.book),
            started_at=round_.started_at,
            has_winner=round_.has_winner,
            winner=round_.winner,
        )

    def get_round(self, number: int) -> Round:
        if number not in self.state.rounds:
            raise UnknownRound(details={"round": number})
        return self.state.rounds[number].model_copy()

    def get_application(self, round_number: int, application_id: int) -> Application:
        application = self.state.find_application(round_number, application_id)
        if application is None:
            raise UnknownApplication(details={"round": round_number, "id": application_id})
        return application.model_copy()

    def get_applications(self, round_number: int) -> List[Application]:
        if round_number not in self.state.rounds:
            raise UnknownRound(details={"round": round_number})
        return [app.model_copy() for app in self.state.applications[round_number]]

    def summarize(self) -> dict:
        """Summary of every round so far, for reports."""
        rounds = []
        for number in sorted(self.state.rounds):
            round_ = self.state.rounds[number]
            rounds.append({
                "round": number,
                "phase": round_.phase.name,
                "applications": len(self.state.applications.get(number, [])),
                "votes": len(self.state.voters.get(number, set())),
                "winner": round_.winner,
                "payout": round_.payout,
            })
        logger.debug(f"Summarized {len(rounds)} rounds")
        return {
            "rounds": rounds,
            "treasury": self.state.treasury,
            "committee": sorted(self.state.committee),
        }
