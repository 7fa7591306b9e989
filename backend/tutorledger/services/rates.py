"""
TutorLedger Backend: Rate Table and Payment Calculator
=======================================================

What:  Maps a class level to an hourly rate and turns a session interval
       into a payment amount.
How:   Pure functions; Decimal arithmetic with ROUND_HALF_UP so 0.5 always
       rounds away from zero regardless of float representation.

Rate tiers (naira per hour):
    Nursery, Year 1 to Year 6   → 3800
    Year 7 to Year 10           → 4300
    Year 11 to Year 12          → 5000
    anything else               → 0
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

PRIMARY_RATE = 3800
JUNIOR_SECONDARY_RATE = 4300
SENIOR_SECONDARY_RATE = 5000

_YEAR_PATTERN = re.compile(r"^year\s*(\d{1,2})$", re.IGNORECASE)


def rate_for(class_level: Optional[str]) -> int:
    """Hourly rate for a class level; unrecognised levels earn 0."""
    if not class_level:
        return 0
    level = class_level.strip()
    if level.lower() == "nursery":
        return PRIMARY_RATE

    match = _YEAR_PATTERN.match(level)
    if not match:
        return 0
    year = int(match.group(1))
    if 1 <= year <= 6:
        return PRIMARY_RATE
    if 7 <= year <= 10:
        return JUNIOR_SECONDARY_RATE
    if 11 <= year <= 12:
        return SENIOR_SECONDARY_RATE
    return 0


def compute_payment(
    class_level: Optional[str],
    start: Optional[datetime],
    end: Optional[datetime],
) -> int:
    """
    Payment for one session: round_half_up(rate * hours).

    Fails closed: a missing bound, a naive/aware mix or end <= start all
    return 0 rather than raising.
    """
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return 0
    try:
        if end <= start:
            return 0
        delta = end - start
    except TypeError:
        return 0

    seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / Decimal(
        1_000_000
    )
    amount = Decimal(rate_for(class_level)) * seconds / Decimal(3600)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount: int) -> str:
    """Display form used on reports, e.g. 6450 → '₦6,450'."""
    return f"₦{amount:,}"
