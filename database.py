# database.py
from pymongo import MongoClient, ASCENDING, DESCENDING
from dotenv import load_dotenv
import os

load_dotenv()
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "bus_reservation")
client = MongoClient(MONGODB_URI)
db = client[MONGODB_DB]

# Collections
users = db.users
buses = db.buses
bookings = db.bookings
seat_claims = db.seat_claims


def ensure_indexes():
    users.create_index([("email", ASCENDING)], unique=True)
    buses.create_index([("bus_number", ASCENDING)], unique=True)
    buses.create_index([("route.from", ASCENDING), ("route.to", ASCENDING)])
    buses.create_index([("status", ASCENDING)])
    bookings.create_index([("booking_code", ASCENDING)], unique=True)
    bookings.create_index([("user_id", ASCENDING), ("status", ASCENDING)])
    bookings.create_index([("bus_id", ASCENDING), ("travel_date", ASCENDING)])
    bookings.create_index([("status", ASCENDING), ("travel_date", DESCENDING)])
    # One live holder per labelled seat, per bus and travel day
    seat_claims.create_index(
        [("bus_id", ASCENDING), ("travel_day", ASCENDING), ("seat_number", ASCENDING)],
        unique=True,
    )
    seat_claims.create_index([("booking_id", ASCENDING)])
