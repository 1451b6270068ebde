from datetime import timedelta

import database
from models.booking import BookingCreate
from utils.auth import pwd_context
from utils.dates import WEEKDAYS, utcnow

DEFAULT_PASSWORD = 'P@ssw0rd'
CONTACT_INFO = {'phone': '9123456780', 'email': 'buyer@test.com'}


def insert_user(email: str, role: str = 'user', name: str = 'Test User', is_active: bool = True) -> dict:
    doc = {
        'name': name,
        'email': email,
        'password': pwd_context.hash(DEFAULT_PASSWORD),
        'role': role,
        'is_active': is_active,
        'created_at': utcnow(),
    }
    doc['_id'] = database.users.insert_one(doc).inserted_id
    return doc


def insert_bus(
    capacity: int = 40,
    available_seats: int = None,
    fare: int = 500,
    status: str = 'active',
    operating_days=None,
    bus_number: str = 'KA01-1234',
) -> dict:
    doc = {
        'bus_number': bus_number,
        'route': {'from': 'Bangalore', 'to': 'Chennai'},
        'capacity': capacity,
        'available_seats': capacity if available_seats is None else available_seats,
        'fare': fare,
        'departure_time': '22:00',
        'arrival_time': '05:30',
        'operating_days': list(WEEKDAYS) if operating_days is None else operating_days,
        'bus_type': 'Volvo',
        'amenities': ['AC'],
        'driver': {'name': 'Suresh', 'license': 'DL-1', 'phone': '9876543210'},
        'status': status,
    }
    doc['_id'] = database.buses.insert_one(doc).inserted_id
    return doc


def booking_request(bus: dict, seats=('A1',), travel_date=None, **overrides) -> BookingCreate:
    passengers = [
        {'name': f'Passenger {i}', 'age': 30, 'gender': 'female', 'seat_number': seat}
        for i, seat in enumerate(seats)
    ]
    payload = {
        'bus_id': str(bus['_id']),
        'passenger_details': passengers,
        'travel_date': travel_date or utcnow() + timedelta(days=2),
        'payment_method': 'upi',
        'contact_info': CONTACT_INFO,
    }
    payload.update(overrides)
    return BookingCreate(**payload)


def booking_payload(bus: dict, seats=('A1',), travel_date=None) -> dict:
    """JSON body for POST /api/bookings."""
    return booking_request(bus, seats, travel_date).model_dump(mode='json')


def auth_headers(user: dict) -> dict:
    return {'X-User-ID': str(user['_id'])}


def available_seats(bus: dict) -> int:
    return database.buses.find_one({'_id': bus['_id']})['available_seats']
