# services/seat_ledger.py
"""Seat counters owned by each bus document.

Both operations are single conditional writes against the bus document, so
concurrent bookings never read a stale ``available_seats`` and write it back.
"""
from pymongo import ReturnDocument

from database import buses
from utils.errors import InsufficientCapacity, NotFound, ValidationFailed
from utils.logger import logger


def reserve(bus_id, count: int) -> dict:
    """Take ``count`` seats off the bus, returning the updated bus document."""
    if count < 1:
        raise ValidationFailed("At least one seat must be booked")

    bus = buses.find_one_and_update(
        {"_id": bus_id, "available_seats": {"$gte": count}},
        {"$inc": {"available_seats": -count}},
        return_document=ReturnDocument.AFTER,
    )
    if bus is not None:
        logger.debug(f"Reserved {count} seat(s) on bus {bus_id}, {bus['available_seats']} left")
        return bus

    current = buses.find_one({"_id": bus_id}, {"available_seats": 1})
    if current is None:
        raise NotFound("Bus not found")
    raise InsufficientCapacity(
        f"Only {current['available_seats']} seats available. You requested {count} seats."
    )


def release(bus_id, count: int) -> None:
    """Give ``count`` seats back, never going above capacity. Never raises NotFound."""
    if count < 1:
        return
    bus = buses.find_one({"_id": bus_id}, {"capacity": 1})
    if bus is None:
        logger.warning(f"Bus {bus_id} no longer exists, {count} released seat(s) dropped")
        return
    headroom_limit = bus["capacity"] - count

    while True:
        result = buses.update_one(
            {"_id": bus_id, "available_seats": {"$lte": headroom_limit}},
            {"$inc": {"available_seats": count}},
        )
        if result.matched_count:
            break
        # Not enough head-room: clamp to capacity
        result = buses.update_one(
            {"_id": bus_id, "available_seats": {"$gt": headroom_limit}},
            {"$set": {"available_seats": bus["capacity"]}},
        )
        if result.matched_count:
            logger.warning(f"Seat release on bus {bus_id} clamped at capacity {bus['capacity']}")
            break
        if buses.find_one({"_id": bus_id}, {"_id": 1}) is None:
            logger.warning(f"Bus {bus_id} removed during seat release")
            return
    logger.debug(f"Released {count} seat(s) on bus {bus_id}")
