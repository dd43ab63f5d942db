"""Errors raised by the scholarship contract.

Every failure is a rejected call: the state is left as it was before the call
and the caller may retry once the violated condition is fixed.
"""

from typing import Any, Dict, Optional


class ScholarshipError(Exception):
    """Base class for all rejected calls."""

    default_reason = "Call rejected"

    def __init__(self, reason: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.reason = reason or self.default_reason
        self.details = details or {}
        super().__init__(self.reason)


class Unauthorized(ScholarshipError):
    """Caller lacks the committee role."""

    default_reason = "Only committee members can do this"


class Forbidden(ScholarshipError):
    """Caller's role is explicitly excluded from the operation."""

    default_reason = "Committee members cannot apply"


class InvalidPhase(ScholarshipError):
    """Operation not valid in the current phase."""

    default_reason = "Operation not allowed in current phase"


class InvalidAmount(ScholarshipError):
    default_reason = "Donation must be > 0"


class InvalidConfig(ScholarshipError):
    """Bad construction parameters."""

    default_reason = "Invalid configuration"


class DuplicateApplication(ScholarshipError):
    default_reason = "You have already applied this round"


class DuplicateVote(ScholarshipError):
    default_reason = "You have already voted this round"


class UnknownApplication(ScholarshipError):
    default_reason = "Application does not exist"


class UnknownRound(ScholarshipError):
    default_reason = "Round does not exist"


class NoApplications(ScholarshipError):
    default_reason = "No applications this round"


class AlreadyMember(ScholarshipError):
    default_reason = "Already a committee member"


class TransferFailed(ScholarshipError):
    """The payout recipient rejected the funds."""

    default_reason = "Transfer to winner failed"


class ReentrantCall(ScholarshipError):
    """A call arrived while a payout transfer was still in flight."""

    default_reason = "Reentrant call rejected"
