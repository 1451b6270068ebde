# routes/bus.py
from fastapi import APIRouter, Depends, Query
from models.bus import BusCreate, BusUpdate, BusStatus, bus_to_doc
from database import buses, bookings
from datetime import datetime
from typing import Optional
import math
import re
import pymongo
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from services.booking_lifecycle import held_seats
from services.booking_state import LIVE_STATES
from utils.auth import get_current_user_admin
from utils.dates import start_of_day, utcnow, weekday_name
from utils.errors import NotFound, ValidationFailed
from utils.logger import logger
from utils.serialize import serialize_doc, parse_object_id

router = APIRouter()


def _with_ledger_view(bus: dict) -> dict:
    out = serialize_doc(bus)
    capacity = bus.get("capacity") or 0
    out["is_bookable"] = bus.get("status") == BusStatus.active.value and bus.get("available_seats", 0) > 0
    out["occupancy_rate"] = round((capacity - bus.get("available_seats", 0)) / capacity * 100, 2) if capacity else 0.0
    return out


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationFailed("Invalid date format. Please use YYYY-MM-DD format.")


# === GET: List buses with filters ===
@router.get("/")
async def get_buses(
    status: Optional[BusStatus] = Query(None),
    bus_type: Optional[str] = Query(None),
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("departure_time", pattern="^(departure_time|fare|capacity|available_seats|created_at)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    query = {}
    if status:
        query["status"] = status.value
    if bus_type:
        query["bus_type"] = bus_type
    if from_:
        query["route.from"] = {"$regex": re.escape(from_), "$options": "i"}
    if to:
        query["route.to"] = {"$regex": re.escape(to), "$options": "i"}

    sort_order = pymongo.ASCENDING if order == "asc" else pymongo.DESCENDING
    cursor = buses.find(query).sort(sort_by, sort_order).skip((page - 1) * limit).limit(limit)
    result = [_with_ledger_view(b) for b in cursor]

    total = buses.count_documents(query)
    total_pages = math.ceil(total / limit)
    return {
        "status": "success",
        "data": {
            "buses": result,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_buses": total,
                "has_next": page < total_pages,
                "has_prev": page > 1,
            },
        },
    }


# === GET: Search bookable buses by route and date ===
@router.get("/search")
async def search_buses(
    from_: str = Query(..., alias="from", min_length=1),
    to: str = Query(..., min_length=1),
    date: str = Query(...),
):
    travel_date = _parse_date(date)
    if travel_date < start_of_day(utcnow()):
        raise ValidationFailed("Travel date cannot be in the past")

    day_name = weekday_name(travel_date)
    query = {
        "route.from": {"$regex": re.escape(from_), "$options": "i"},
        "route.to": {"$regex": re.escape(to), "$options": "i"},
        "operating_days": day_name,
        "status": BusStatus.active.value,
        "available_seats": {"$gt": 0},
    }
    result = [_with_ledger_view(b) for b in buses.find(query).sort("departure_time", pymongo.ASCENDING)]
    return {
        "status": "success",
        "data": {
            "buses": result,
            "search_criteria": {"from": from_, "to": to, "date": date, "day_of_week": day_name},
            "results_count": len(result),
        },
    }


@router.get("/{bus_id}")
async def get_bus(bus_id: str):
    bus = buses.find_one({"_id": parse_object_id(bus_id, "bus ID")})
    if not bus:
        raise NotFound("Bus not found")
    return {"status": "success", "data": {"bus": _with_ledger_view(bus)}}


# === GET: Seat map for one travel day ===
@router.get("/{bus_id}/seats")
async def get_bus_seats(bus_id: str, date: str = Query(...)):
    bus_obj_id = parse_object_id(bus_id, "bus ID")
    bus = buses.find_one({"_id": bus_obj_id})
    if not bus:
        raise NotFound("Bus not found")
    taken = held_seats(bus_obj_id, _parse_date(date))
    return {
        "status": "success",
        "data": {
            "bus_id": bus_id,
            "date": date,
            "capacity": bus["capacity"],
            "available_seats": bus["available_seats"],
            "booked_seats": taken,
        },
    }


# === POST: Create bus (ADMIN ONLY) ===
@router.post("/", status_code=201)
async def create_bus(bus_in: BusCreate, current_admin=Depends(get_current_user_admin)):
    doc = bus_to_doc(bus_in)
    if buses.find_one({"bus_number": doc["bus_number"]}):
        raise ValidationFailed("Bus with this number already exists")

    now = utcnow()
    doc["available_seats"] = doc["capacity"]
    doc["created_at"] = now
    doc["updated_at"] = now
    try:
        result = buses.insert_one(doc)
    except DuplicateKeyError:
        raise ValidationFailed("Bus with this number already exists")
    doc["_id"] = result.inserted_id
    logger.info(f"Bus {doc['bus_number']} created with {doc['capacity']} seats")
    return {
        "status": "success",
        "message": "Bus created successfully",
        "data": {"bus": _with_ledger_view(doc)},
    }


# === PUT: Update bus (ADMIN ONLY) ===
@router.put("/{bus_id}")
async def update_bus(bus_id: str, bus_in: BusUpdate, current_admin=Depends(get_current_user_admin)):
    bus_obj_id = parse_object_id(bus_id, "bus ID")
    existing = buses.find_one({"_id": bus_obj_id})
    if not existing:
        raise NotFound("Bus not found")

    update_fields = bus_to_doc(bus_in, exclude_unset=True)
    update_fields = {k: v for k, v in update_fields.items() if v is not None}
    if not update_fields:
        raise ValidationFailed("No data sent to update")

    if "bus_number" in update_fields and update_fields["bus_number"] != existing["bus_number"]:
        if buses.find_one({"bus_number": update_fields["bus_number"], "_id": {"$ne": bus_obj_id}}):
            raise ValidationFailed("Another bus with this number already exists")

    query = {"_id": bus_obj_id}
    update = {"$set": {**update_fields, "updated_at": utcnow()}}
    if "capacity" in update_fields:
        # Shift the ledger by the capacity delta in the same write, guarded on
        # the booked count so capacity never drops below seats already sold
        delta = update_fields["capacity"] - existing["capacity"]
        booked = existing["capacity"] - existing["available_seats"]
        if update_fields["capacity"] < booked:
            raise ValidationFailed(
                f"Capacity cannot be lower than the {booked} seat(s) already booked"
            )
        query["capacity"] = existing["capacity"]
        query["available_seats"] = existing["available_seats"]
        update["$inc"] = {"available_seats": delta}

    updated = buses.find_one_and_update(query, update, return_document=ReturnDocument.AFTER)
    if updated is None:
        raise ValidationFailed("Bus seats changed while updating, please retry")
    return {
        "status": "success",
        "message": "Bus updated successfully",
        "data": {"bus": _with_ledger_view(updated)},
    }


# === DELETE: Delete bus (ADMIN ONLY) ===
@router.delete("/{bus_id}")
async def delete_bus(bus_id: str, current_admin=Depends(get_current_user_admin)):
    bus_obj_id = parse_object_id(bus_id, "bus ID")
    if not buses.find_one({"_id": bus_obj_id}):
        raise NotFound("Bus not found")

    active_bookings = bookings.count_documents({
        "bus_id": bus_obj_id,
        "status": {"$in": LIVE_STATES},
        "travel_date": {"$gte": start_of_day(utcnow())},
    })
    if active_bookings > 0:
        raise ValidationFailed(
            f"Cannot delete bus. It has {active_bookings} active booking(s). "
            "Cancel all bookings first or set bus status to inactive."
        )
    buses.delete_one({"_id": bus_obj_id})
    logger.info(f"Bus {bus_id} deleted")
    return {"status": "success", "message": "Bus deleted successfully"}
