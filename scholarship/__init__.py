"""Committee-run recurring scholarship with pooled donations and winner-takes-all payout."""

from scholarship.controller import Scholarship
from scholarship.exceptions import (
    AlreadyMember,
    DuplicateApplication,
    DuplicateVote,
    Forbidden,
    InvalidAmount,
    InvalidConfig,
    InvalidPhase,
    NoApplications,
    ReentrantCall,
    ScholarshipError,
    TransferFailed,
    Unauthorized,
    UnknownApplication,
    UnknownRound,
)
from scholarship.models import Application, Phase, Round, RoundInfo, ScholarshipConfig
from scholarship.treasury import AccountLedger
from scholarship.utils import ManualClock, SystemClock, format_units, to_units

__all__ = [
    "AccountLedger",
    "AlreadyMember",
    "Application",
    "DuplicateApplication",
    "DuplicateVote",
    "Forbidden",
    "InvalidAmount",
    "InvalidConfig",
    "InvalidPhase",
    "ManualClock",
    "NoApplications",
    "Phase",
    "ReentrantCall",
    "Round",
    "RoundInfo",
    "Scholarship",
    "ScholarshipConfig",
    "ScholarshipError",
    "SystemClock",
    "TransferFailed",
    "Unauthorized",
    "UnknownApplication",
    "UnknownRound",
    "format_units",
    "to_units",
]
