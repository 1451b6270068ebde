# services/refund_policy.py
"""Cancellation window and refund amount, as a function of time to departure.

Only confirmed bookings can be cancelled, and only more than two hours before
departure. More than 24 hours out returns 90% of the paid amount, otherwise
50%. Amounts are floored to whole currency units.
"""
import math
from datetime import datetime, timedelta
from typing import NamedTuple

from models.booking import BookingStatus

CANCELLATION_CUTOFF = timedelta(hours=2)
FULL_REFUND_WINDOW = timedelta(hours=24)
EARLY_REFUND_RATE = 0.9
LATE_REFUND_RATE = 0.5


class RefundDecision(NamedTuple):
    can_cancel: bool
    refund_amount: int


def evaluate_refund(now: datetime, travel_date: datetime, total_amount, status) -> RefundDecision:
    time_left = travel_date - now
    can_cancel = BookingStatus(status) == BookingStatus.confirmed and time_left > CANCELLATION_CUTOFF
    if not can_cancel:
        return RefundDecision(False, 0)
    rate = EARLY_REFUND_RATE if time_left > FULL_REFUND_WINDOW else LATE_REFUND_RATE
    return RefundDecision(True, math.floor(total_amount * rate))
