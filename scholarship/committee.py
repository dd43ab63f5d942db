from typing import Iterable

from scholarship.exceptions import AlreadyMember, InvalidConfig
from scholarship.models import ScholarshipState


class CommitteeRegistry:
    """Append-only set of accounts allowed to administer rounds."""

    def __init__(self, state: ScholarshipState):
        self.state = state

    def seed(self, accounts: Iterable[str]):
        """Install the initial committee at deployment."""
        accounts = list(accounts)
        if not accounts:
            raise InvalidConfig("Committee list must not be empty")
        for account in accounts:
            self._check_account(account)
        self.state.committee.update(accounts)

    def is_member(self, account: str) -> bool:
        return account in self.state.committee

    def count(self) -> int:
        return len(self.state.committee)

    def add(self, account: str):
        self._check_account(account)
        if self.is_member(account):
            raise AlreadyMember(details={"account": account})
        self.state.committee.add(account)

    @staticmethod
    def _check_account(account: str):
        if not isinstance(account, str) or not account.strip():
            raise InvalidConfig("Committee account must be a non-empty address", {"account": account})
