# seed.py
"""Wipe the database and load demo users, buses and a few bookings."""
from database import users, buses, bookings, seat_claims, ensure_indexes
from datetime import timedelta
from models.booking import BookingCreate
from services import booking_lifecycle
from utils.auth import pwd_context
from utils.dates import WEEKDAYS, start_of_day, utcnow

# === Remove old data ===
users.delete_many({})
buses.delete_many({})
bookings.delete_many({})
seat_claims.delete_many({})
ensure_indexes()

print("Old data removed\n")

# ================== 1. ADMIN & USERS ==================
now = utcnow()
users.insert_many([
    {
        "name": "Admin BusGo",
        "email": "admin@busgo.com",
        "password": pwd_context.hash("admin123"),
        "role": "admin",
        "is_active": True,
        "created_at": now,
    },
    {
        "name": "Ravi Kumar",
        "email": "ravi@busgo.com",
        "password": pwd_context.hash("123456"),
        "role": "user",
        "is_active": True,
        "created_at": now,
    },
    {
        "name": "Anita Sharma",
        "email": "anita@busgo.com",
        "password": pwd_context.hash("123456"),
        "role": "user",
        "is_active": True,
        "created_at": now,
    },
])
print("Admin + 2 users created")

# ================== 2. BUSES ==================
driver = {"name": "Suresh", "license": "DL-0420110012345", "phone": "9876543210"}
bus_docs = [
    {"bus_number": "KA01-1234", "route": {"from": "Bangalore", "to": "Chennai"}, "capacity": 40, "fare": 850,
     "departure_time": "22:00", "arrival_time": "05:30", "operating_days": WEEKDAYS, "bus_type": "Volvo",
     "amenities": ["AC", "WiFi", "Water Bottle"]},
    {"bus_number": "KA01-5678", "route": {"from": "Bangalore", "to": "Mysore"}, "capacity": 30, "fare": 300,
     "departure_time": "07:15", "arrival_time": "10:00", "operating_days": ["Monday", "Wednesday", "Friday"],
     "bus_type": "Non-AC", "amenities": []},
    {"bus_number": "TN09-4321", "route": {"from": "Chennai", "to": "Hyderabad"}, "capacity": 36, "fare": 1200,
     "departure_time": "19:30", "arrival_time": "07:00", "operating_days": WEEKDAYS, "bus_type": "Sleeper",
     "amenities": ["AC", "Charging Point", "Snacks"]},
    {"bus_number": "MH12-0007", "route": {"from": "Pune", "to": "Mumbai"}, "capacity": 45, "fare": 500,
     "departure_time": "06:00", "arrival_time": "09:30", "operating_days": ["Saturday", "Sunday"],
     "bus_type": "AC", "amenities": ["AC"], "status": "maintenance"},
]
for doc in bus_docs:
    doc.setdefault("status", "active")
    doc["driver"] = driver
    doc["available_seats"] = doc["capacity"]
    doc["created_at"] = now
    doc["updated_at"] = now
buses.insert_many(bus_docs)
print(f"{len(bus_docs)} buses created")

# ================== 3. BOOKINGS (through the lifecycle, so seats add up) ==================
ravi = users.find_one({"email": "ravi@busgo.com"})
anita = users.find_one({"email": "anita@busgo.com"})
chennai = buses.find_one({"bus_number": "KA01-1234"})
hyderabad = buses.find_one({"bus_number": "TN09-4321"})
contact = {"phone": "9123456780", "email": "ravi@busgo.com"}

first = booking_lifecycle.create_booking(BookingCreate(
    bus_id=str(chennai["_id"]),
    travel_date=start_of_day(now) + timedelta(days=3, hours=22),
    payment_method="upi",
    contact_info=contact,
    passenger_details=[
        {"name": "Ravi Kumar", "age": 34, "gender": "male", "seat_number": "A1"},
        {"name": "Meera Kumar", "age": 31, "gender": "female", "seat_number": "A2"},
    ],
), ravi)
booking_lifecycle.confirm_booking(first["_id"])

booking_lifecycle.create_booking(BookingCreate(
    bus_id=str(hyderabad["_id"]),
    travel_date=start_of_day(now) + timedelta(days=5, hours=19, minutes=30),
    payment_method="card",
    contact_info={"phone": "9988776655", "email": "anita@busgo.com"},
    passenger_details=[{"name": "Anita Sharma", "age": 28, "gender": "female", "seat_number": "L4"}],
), anita)
print("2 bookings created (1 confirmed, 1 pending)\n")

print("SEED DONE!")
print("Admin login: admin@busgo.com / admin123")
print("User login: ravi@busgo.com / 123456")
