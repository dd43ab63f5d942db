"""
Utility functions for amounts and time.

This module contains small helpers with no domain dependencies.
"""

import time
from decimal import Decimal, InvalidOperation
from typing import Union

# Base units per whole coin (same scale as wei per ether)
UNITS_PER_COIN = 10**18


def to_units(amount: Union[str, int, float, Decimal]) -> int:
    """Convert a human amount such as "1.01" into integer base units.

    Args:
        amount: Amount in whole coins

    Returns:
        int: Amount in base units

    Raises:
        ValueError: If the amount is not a number or has more than 18 decimals
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Not a valid amount: {amount!r}") from exc

    units = value * UNITS_PER_COIN
    if units != units.to_integral_value():
        raise ValueError(f"Amount {amount!r} is finer than one base unit")
    return int(units)


def format_units(units: int) -> str:
    """Render base units as a whole-coin string, e.g. 1010000000000000000 -> "1.01"."""
    value = Decimal(units) / UNITS_PER_COIN
    text = format(value.normalize(), "f")
    return text


class SystemClock:
    """Wall clock in unix seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Used by tests and the simulator."""

    def __init__(self, start: int = 1_700_000_000):
        self.current = start

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self.current += seconds
        return self.current
