# services/booking_lifecycle.py
"""Create, confirm, cancel and complete bookings.

Every operation that moves seats goes through ``seat_ledger`` and every status
change is a conditional update on the status that was read, so two requests
racing on the same booking cannot both apply. Labelled seats are claimed in
``seat_claims`` whose unique index makes the database the arbiter of seat
conflicts.

Write order on create is claims -> ledger -> booking; a failure at any step
undoes the earlier ones.
"""
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import bookings, buses, seat_claims
from models.booking import BookingCreate, BookingStatus, PaymentStatus
from models.bus import BusStatus
from services import seat_ledger
from services.booking_state import LIVE_STATES, assert_transition
from services.refund_policy import evaluate_refund
from utils.auth import ensure_owner_or_admin, is_admin
from utils.dates import day_bounds, start_of_day, to_naive_utc, utcnow, weekday_name
from utils.errors import (
    BookingAPIError,
    InsufficientCapacity,
    InvalidTransition,
    NotFound,
    SeatConflict,
    ValidationFailed,
)
from utils.logger import logger
from utils.serialize import parse_object_id

DEFAULT_CANCELLATION_REASON = "User requested cancellation"


def generate_booking_code(booking_id: ObjectId, now: datetime) -> str:
    return f"BKG{now.strftime('%Y%m%d')}{str(booking_id)[-6:]}".upper()


def find_booking(booking_id) -> dict:
    if not isinstance(booking_id, ObjectId):
        booking_id = parse_object_id(booking_id, "booking ID")
    booking = bookings.find_one({"_id": booking_id})
    if not booking:
        raise NotFound("Booking not found")
    return booking


def get_booking(booking_id, user: dict) -> dict:
    booking = find_booking(booking_id)
    ensure_owner_or_admin(booking["user_id"], user, "You can only view your own bookings.")
    return booking


def held_seats(bus_id: ObjectId, travel_date: datetime) -> List[str]:
    """Seat labels held by pending/confirmed bookings of the bus on that calendar day."""
    start, end = day_bounds(to_naive_utc(travel_date))
    cursor = bookings.find(
        {
            "bus_id": bus_id,
            "travel_date": {"$gte": start, "$lt": end},
            "status": {"$in": LIVE_STATES},
        }
    )
    seats = {
        p["seat_number"]
        for b in cursor
        for p in b.get("passenger_details", [])
        if p.get("seat_number")
    }
    return sorted(seats)


# === Seat claims ===

def _claim_seats(bus_id: ObjectId, travel_day: datetime, seat_numbers: List[str], booking_id: ObjectId):
    for seat in seat_numbers:
        try:
            seat_claims.insert_one({
                "bus_id": bus_id,
                "travel_day": travel_day,
                "seat_number": seat,
                "booking_id": booking_id,
            })
        except DuplicateKeyError:
            _free_claims(booking_id)
            taken = sorted(
                c["seat_number"]
                for c in seat_claims.find({
                    "bus_id": bus_id,
                    "travel_day": travel_day,
                    "seat_number": {"$in": seat_numbers},
                })
            )
            raise SeatConflict(
                f"One or more requested seats are already booked: {', '.join(taken) or seat}",
                seats=taken or [seat],
            )
        except PyMongoError:
            logger.exception(f"Seat claim failed for bus {bus_id}, dropping claims of {booking_id}")
            _free_claims(booking_id)
            raise


def _free_claims(booking_id: ObjectId):
    seat_claims.delete_many({"booking_id": booking_id})


def _seat_label(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().upper() or None


# === Create ===

def create_booking(booking_in: BookingCreate, user: dict, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    bus_id = parse_object_id(booking_in.bus_id, "bus ID")

    bus = buses.find_one({"_id": bus_id})
    if not bus:
        raise NotFound("Bus not found")
    if bus.get("status") != BusStatus.active.value:
        raise ValidationFailed("Bus is not available for booking")

    travel_date = to_naive_utc(booking_in.travel_date)
    if travel_date < start_of_day(now):
        raise ValidationFailed("Travel date cannot be in the past")

    day_name = weekday_name(travel_date)
    operating_days = bus.get("operating_days", [])
    if day_name not in operating_days:
        raise ValidationFailed(
            f"Bus does not operate on {day_name}. Operating days: {', '.join(operating_days)}"
        )

    seat_count = len(booking_in.passenger_details)
    if bus["available_seats"] < seat_count:
        raise InsufficientCapacity(
            f"Only {bus['available_seats']} seats available. You requested {seat_count} seats."
        )

    seat_numbers = [s for s in (_seat_label(p.seat_number) for p in booking_in.passenger_details) if s]
    duplicates = sorted({s for s in seat_numbers if seat_numbers.count(s) > 1})
    if duplicates:
        raise ValidationFailed(f"Seat requested more than once: {', '.join(duplicates)}")

    booking_id = ObjectId()
    _claim_seats(bus_id, start_of_day(travel_date), seat_numbers, booking_id)

    try:
        bus = seat_ledger.reserve(bus_id, seat_count)
    except (BookingAPIError, PyMongoError):
        _free_claims(booking_id)
        raise

    passengers = []
    for p in booking_in.passenger_details:
        passenger = p.model_dump(mode="json")
        passenger["seat_number"] = _seat_label(p.seat_number)
        passengers.append(passenger)

    booking_doc = {
        "_id": booking_id,
        "booking_code": generate_booking_code(booking_id, now),
        "user_id": user["_id"],
        "bus_id": bus_id,
        "passenger_details": passengers,
        "seat_count": seat_count,
        "travel_date": travel_date,
        "total_amount": bus["fare"] * seat_count,
        "status": BookingStatus.pending.value,
        "payment_status": PaymentStatus.pending.value,
        "payment_method": booking_in.payment_method.value,
        "contact_info": booking_in.contact_info.model_dump(mode="json"),
        "refund_amount": 0,
        "booking_date": now,
        "created_at": now,
        "updated_at": now,
    }
    try:
        bookings.insert_one(booking_doc)
    except PyMongoError:
        logger.exception(f"Booking insert failed for bus {bus_id}, rolling back {seat_count} seat(s)")
        seat_ledger.release(bus_id, seat_count)
        _free_claims(booking_id)
        raise

    logger.info(
        f"Booking {booking_doc['booking_code']} created: bus {bus_id}, "
        f"{seat_count} seat(s), travel {travel_date:%Y-%m-%d}"
    )
    return booking_doc


# === Transitions ===

def _apply_transition(booking: dict, target: BookingStatus, fields: dict) -> dict:
    """Set ``fields`` only if the booking still has the status we read."""
    updated = bookings.find_one_and_update(
        {"_id": booking["_id"], "status": booking["status"]},
        {"$set": {"status": target.value, **fields}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        current = bookings.find_one({"_id": booking["_id"]}, {"status": 1})
        if current is None:
            raise NotFound("Booking not found")
        raise InvalidTransition(
            f"Booking status changed to {current['status']} while processing the request"
        )
    return updated


def confirm_booking(booking_id, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    booking = find_booking(booking_id)
    assert_transition(booking["status"], BookingStatus.confirmed)

    updated = _apply_transition(booking, BookingStatus.confirmed, {
        "payment_status": PaymentStatus.paid.value,
        "confirmed_at": now,
        "updated_at": now,
    })
    logger.info(f"Booking {updated['booking_code']} confirmed")
    return updated


def cancel_booking(booking_id, user: dict, reason: Optional[str] = None,
                   now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    booking = find_booking(booking_id)
    ensure_owner_or_admin(booking["user_id"], user, "You can only cancel your own bookings.")
    assert_transition(booking["status"], BookingStatus.cancelled)

    decision = evaluate_refund(now, booking["travel_date"], booking["total_amount"], booking["status"])
    if not decision.can_cancel:
        # Admins may still call off a confirmed trip inside the cut-off, without refund
        late_admin_cancel = is_admin(user) and booking["status"] == BookingStatus.confirmed.value
        if not late_admin_cancel:
            raise InvalidTransition("Booking cannot be cancelled at this time")
        logger.warning(f"Booking {booking['booking_code']} cancelled by admin inside the refund cut-off")

    payment_status = PaymentStatus.refunded if decision.refund_amount > 0 else PaymentStatus.paid
    updated = _apply_transition(booking, BookingStatus.cancelled, {
        "cancellation_reason": (reason or "").strip() or DEFAULT_CANCELLATION_REASON,
        "cancellation_date": now,
        "refund_amount": decision.refund_amount,
        "payment_status": payment_status.value,
        "updated_at": now,
    })

    # The status flip above succeeded exactly once, seats go back exactly once
    seat_ledger.release(booking["bus_id"], booking["seat_count"])
    _free_claims(booking["_id"])
    logger.info(
        f"Booking {updated['booking_code']} cancelled, refund {decision.refund_amount}, "
        f"{booking['seat_count']} seat(s) released"
    )
    return updated


def complete_booking(booking_id, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    booking = find_booking(booking_id)
    assert_transition(booking["status"], BookingStatus.completed)
    if now < booking["travel_date"]:
        raise InvalidTransition("Booking cannot be completed before its travel date")
    updated = _apply_transition(booking, BookingStatus.completed, {
        "completed_at": now,
        "updated_at": now,
    })
    _free_claims(booking["_id"])
    logger.info(f"Booking {updated['booking_code']} completed")
    return updated
