# utils/errors.py
"""Error kinds raised by the booking core and the routes.

Each kind carries the HTTP status it maps to; the handlers in ``main.py``
turn them into ``{"status": "error", "message": ...}`` responses.
"""
from typing import List, Optional


class BookingAPIError(Exception):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List] = None):
        self.message = message
        self.errors = errors
        super().__init__(message)


class ValidationFailed(BookingAPIError):
    status_code = 400


class Unauthenticated(BookingAPIError):
    status_code = 401


class Forbidden(BookingAPIError):
    status_code = 403


class NotFound(BookingAPIError):
    status_code = 404


class InsufficientCapacity(BookingAPIError):
    status_code = 409


class SeatConflict(BookingAPIError):
    status_code = 409

    def __init__(self, message: str, seats: Optional[List[str]] = None):
        super().__init__(message)
        self.seats = seats or []


class InvalidTransition(BookingAPIError):
    status_code = 409
