"""Overdue predicate and fine arithmetic.

Both functions are pure: they only look at their arguments, never at the
clock or the database, so the borrowal service passes ``now`` explicitly.
"""
import math
from datetime import datetime
from decimal import Decimal

from library_api.models.borrowal import STATUS_RETURNED

DEFAULT_FINE_PER_DAY = Decimal("1")
SECONDS_PER_DAY = 24 * 60 * 60
CENTS = Decimal("0.01")


def is_overdue(due_date: datetime, now: datetime, status: str) -> bool:
    if status == STATUS_RETURNED or due_date is None:
        return False
    return now > due_date


def overdue_days(due_date: datetime, now: datetime) -> int:
    """Started days past the due date (a partial day counts as a full one)."""
    if due_date is None or now <= due_date:
        return 0
    return math.ceil((now - due_date).total_seconds() / SECONDS_PER_DAY)


def calculate_fine(due_date: datetime, now: datetime, rate_per_day=DEFAULT_FINE_PER_DAY,
                   returned: bool = False) -> Decimal:
    if returned:
        return Decimal("0.00")
    rate = Decimal(str(rate_per_day))
    if rate < 0:
        raise ValueError("rate_per_day negatif olamaz")
    return (rate * overdue_days(due_date, now)).quantize(CENTS)
