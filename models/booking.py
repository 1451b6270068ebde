# models/booking.py

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"
    failed = "failed"


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    upi = "upi"
    wallet = "wallet"
    netbanking = "netbanking"


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class Passenger(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    age: int = Field(..., ge=1, le=120)
    gender: Gender
    seat_number: Optional[str] = Field(None, min_length=1, max_length=10)  # A1, B12 ...


class ContactInfo(BaseModel):
    phone: str = Field(..., pattern=r"^\d{10}$")
    email: EmailStr


class BookingCreate(BaseModel):
    bus_id: str
    passenger_details: List[Passenger] = Field(..., min_length=1, max_length=10)
    travel_date: datetime
    payment_method: PaymentMethod
    contact_info: ContactInfo


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=200)
