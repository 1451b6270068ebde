# routes/booking.py
from fastapi import APIRouter, Body, Depends, Query
from models.booking import BookingCreate, BookingCancel, BookingStatus
from database import bookings, buses, users
from datetime import datetime, timedelta
from typing import Optional
import math
import pymongo
from services import booking_lifecycle
from utils.auth import get_current_user, get_current_user_admin, ensure_owner_or_admin
from utils.errors import NotFound, ValidationFailed
from utils.serialize import serialize_doc, parse_object_id

router = APIRouter()

BUS_SUMMARY = {"bus_number": 1, "route": 1, "departure_time": 1, "arrival_time": 1, "bus_type": 1}
USER_SUMMARY = {"name": 1, "email": 1}


def _with_refs(booking: dict) -> dict:
    """Attach bus and user summaries, like a join on bus_id / user_id."""
    out = serialize_doc(booking)
    out["bus"] = serialize_doc(buses.find_one({"_id": booking["bus_id"]}, BUS_SUMMARY))
    out["user"] = serialize_doc(users.find_one({"_id": booking["user_id"]}, USER_SUMMARY))
    return out


def _page(query: dict, page: int, limit: int, sort_by: str, order: str) -> dict:
    sort_order = pymongo.ASCENDING if order == "asc" else pymongo.DESCENDING
    cursor = bookings.find(query).sort(sort_by, sort_order).skip((page - 1) * limit).limit(limit)
    result = [_with_refs(b) for b in cursor]
    total = bookings.count_documents(query)
    total_pages = math.ceil(total / limit)
    return {
        "bookings": result,
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "total_bookings": total,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def _parse_day(value: str, label: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationFailed(f"Invalid {label}. Please use YYYY-MM-DD format.")


# === POST: Create booking ===
@router.post("/", status_code=201)
async def create_booking(booking_in: BookingCreate, current_user=Depends(get_current_user)):
    booking = booking_lifecycle.create_booking(booking_in, current_user)
    return {
        "status": "success",
        "message": "Booking created successfully",
        "data": {"booking": _with_refs(booking)},
    }


# === GET: All bookings (ADMIN ONLY) ===
@router.get("/")
async def get_bookings(
    status: Optional[BookingStatus] = Query(None),
    bus_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("created_at", pattern="^(created_at|travel_date|total_amount)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    current_admin=Depends(get_current_user_admin),
):
    query = {}
    if status:
        query["status"] = status.value
    if bus_id:
        query["bus_id"] = parse_object_id(bus_id, "bus ID")
    if user_id:
        query["user_id"] = parse_object_id(user_id, "user ID")
    if date_from or date_to:
        query["travel_date"] = {}
        if date_from:
            query["travel_date"]["$gte"] = _parse_day(date_from, "date_from")
        if date_to:
            # inclusive of the whole date_to day
            query["travel_date"]["$lt"] = _parse_day(date_to, "date_to") + timedelta(days=1)

    return {"status": "success", "data": _page(query, page, limit, sort_by, order)}


# === GET: Bookings of one user (owner or admin) ===
@router.get("/user/{user_id}")
async def get_user_bookings(
    user_id: str,
    status: Optional[BookingStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user=Depends(get_current_user),
):
    user_obj_id = parse_object_id(user_id, "user ID")
    ensure_owner_or_admin(user_obj_id, current_user, "You can only view your own bookings.")
    if not users.find_one({"_id": user_obj_id}, {"_id": 1}):
        raise NotFound("User not found")

    query = {"user_id": user_obj_id}
    if status:
        query["status"] = status.value
    return {"status": "success", "data": _page(query, page, limit, "created_at", "desc")}


@router.get("/{booking_id}")
async def get_booking(booking_id: str, current_user=Depends(get_current_user)):
    booking = booking_lifecycle.get_booking(booking_id, current_user)
    return {"status": "success", "data": {"booking": _with_refs(booking)}}


# === PUT: Confirm booking (ADMIN ONLY / payment callback) ===
@router.put("/{booking_id}/confirm")
async def confirm_booking(booking_id: str, current_admin=Depends(get_current_user_admin)):
    booking = booking_lifecycle.confirm_booking(booking_id)
    return {
        "status": "success",
        "message": "Booking confirmed successfully",
        "data": {"booking": _with_refs(booking)},
    }


# === PUT: Mark travelled booking completed (ADMIN ONLY) ===
@router.put("/{booking_id}/complete")
async def complete_booking(booking_id: str, current_admin=Depends(get_current_user_admin)):
    booking = booking_lifecycle.complete_booking(booking_id)
    return {
        "status": "success",
        "message": "Booking completed",
        "data": {"booking": _with_refs(booking)},
    }


# === DELETE: Cancel booking + release seats ===
@router.delete("/{booking_id}")
async def cancel_booking(
    booking_id: str,
    cancel_in: Optional[BookingCancel] = Body(None),
    current_user=Depends(get_current_user),
):
    reason = cancel_in.reason if cancel_in else None
    booking = booking_lifecycle.cancel_booking(booking_id, current_user, reason)
    refund = booking["refund_amount"]
    return {
        "status": "success",
        "message": "Booking cancelled successfully",
        "data": {
            "booking": _with_refs(booking),
            "refund_amount": refund,
            "refund_status": "Refund will be processed" if refund > 0 else "No refund applicable",
        },
    }
