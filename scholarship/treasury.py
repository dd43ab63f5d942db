from typing import Callable, Dict, Optional

from scholarship.exceptions import InvalidAmount, TransferFailed
from scholarship.models import ScholarshipState
from scholarship.simlog import EventType, LogEntry, LogLevel, log_event


class AccountLedger:
    """External account balances kept by the hosting environment.

    Payouts land here. A recipient may register a hook that is called before
    funds are credited; if the hook raises, the transfer is rejected.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self.balances = dict(balances or {})
        self.receivers: Dict[str, Callable[[int], None]] = {}

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def register_receiver(self, account: str, hook: Callable[[int], None]):
        self.receivers[account] = hook

    def transfer(self, to: str, amount: int):
        hook = self.receivers.get(to)
        if hook is not None:
            try:
                hook(amount)
            except Exception as exc:
                raise TransferFailed(
                    details={"recipient": to, "amount": amount, "cause": str(exc)}
                ) from exc
        self.balances[to] = self.balance_of(to) + amount


class Treasury:
    """Stateless service class managing the pooled balance on shared ScholarshipState."""

    def __init__(self, state: ScholarshipState, ledger: AccountLedger):
        self.state = state
        self.ledger = ledger

    def get_balance(self) -> int:
        return self.state.treasury

    def deposit(self, donor: str, amount: int, reason: str):
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(details={"amount": amount})

        old_balance = self.state.treasury
        self.state.treasury = old_balance + amount

        log_event(
            LogEntry(
                round=self.state.current_round,
                event_type=EventType.TREASURY_CREDITED,
                account=donor,
                payload={
                    "amount": amount,
                    "reason": reason,
                    "old_balance": old_balance,
                    "new_balance": self.state.treasury,
                },
                message=f"Treasury credited: {donor} +{amount} ({reason})",
                level=LogLevel.DEBUG,
            )
        )

    def drain(self) -> int:
        """Zero the balance and return what it held. The caller moves the funds."""
        amount = self.state.treasury
        self.state.treasury = 0
        return amount

    def pay(self, recipient: str, amount: int):
        """Hand funds to the external ledger. Must be the last step of a call."""
        try:
            self.ledger.transfer(recipient, amount)
        except TransferFailed as exc:
            log_event(
                LogEntry(
                    round=self.state.current_round,
                    event_type=EventType.PAYOUT_FAILED,
                    account=recipient,
                    payload={"amount": amount, **exc.details},
                    message=f"Payout to {recipient} failed: {exc.reason}",
                    level=LogLevel.WARNING,
                )
            )
            raise

        log_event(
            LogEntry(
                round=self.state.current_round,
                event_type=EventType.PAYOUT_TRANSFERRED,
                account=recipient,
                payload={
                    "amount": amount,
                    "recipient_balance": self.ledger.balance_of(recipient),
                },
                message=f"Payout transferred: {recipient} +{amount}",
            )
        )
