# services/booking_state.py
"""Booking state machine."""
from models.booking import BookingStatus
from utils.errors import InvalidTransition

BOOKING_TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.cancelled, BookingStatus.completed},
    BookingStatus.cancelled: set(),
    BookingStatus.completed: set(),
}

TERMINAL_STATES = {s for s, targets in BOOKING_TRANSITIONS.items() if not targets}

# Statuses whose bookings hold seats on the bus
LIVE_STATES = [BookingStatus.pending.value, BookingStatus.confirmed.value]


def can_transition(current, target) -> bool:
    return BookingStatus(target) in BOOKING_TRANSITIONS[BookingStatus(current)]


def assert_transition(current, target) -> None:
    current, target = BookingStatus(current), BookingStatus(target)
    if target not in BOOKING_TRANSITIONS[current]:
        if current in TERMINAL_STATES:
            raise InvalidTransition(f"Booking is already {current.value}")
        raise InvalidTransition(
            f"Booking cannot be {target.value} from status {current.value}"
        )
