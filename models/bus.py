# models/bus.py
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from utils.dates import WEEKDAYS

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
PHONE_PATTERN = r"^\d{10}$"


class BusStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    maintenance = "maintenance"


class BusType(str, Enum):
    ac = "AC"
    non_ac = "Non-AC"
    sleeper = "Sleeper"
    semi_sleeper = "Semi-Sleeper"
    volvo = "Volvo"
    luxury = "Luxury"


class Amenity(str, Enum):
    ac = "AC"
    wifi = "WiFi"
    charging_point = "Charging Point"
    entertainment = "Entertainment"
    snacks = "Snacks"
    water_bottle = "Water Bottle"


class Route(BaseModel):
    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)

    model_config = {"populate_by_name": True}


class Driver(BaseModel):
    name: str = Field(..., min_length=1)
    license: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=PHONE_PATTERN)


def _check_days(days):
    if days is None:
        return days
    unknown = [d for d in days if d not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Invalid operating days: {', '.join(unknown)}")
    # keep week order, drop repeats
    return [d for d in WEEKDAYS if d in days]


class BusCreate(BaseModel):
    bus_number: str = Field(..., pattern=r"^[A-Za-z0-9-]+$", max_length=20)
    route: Route
    capacity: int = Field(..., ge=1, le=100)
    fare: int = Field(..., ge=0)
    departure_time: str = Field(..., pattern=TIME_PATTERN)
    arrival_time: str = Field(..., pattern=TIME_PATTERN)
    operating_days: List[str] = Field(..., min_length=1)
    bus_type: BusType
    amenities: List[Amenity] = []
    driver: Driver
    status: BusStatus = BusStatus.active

    @field_validator("operating_days")
    @classmethod
    def check_operating_days(cls, v):
        return _check_days(v)


class BusUpdate(BaseModel):
    # available_seats is owned by the booking flow and is not accepted here
    bus_number: Optional[str] = Field(None, pattern=r"^[A-Za-z0-9-]+$", max_length=20)
    route: Optional[Route] = None
    capacity: Optional[int] = Field(None, ge=1, le=100)
    fare: Optional[int] = Field(None, ge=0)
    departure_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    arrival_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    operating_days: Optional[List[str]] = Field(None, min_length=1)
    bus_type: Optional[BusType] = None
    amenities: Optional[List[Amenity]] = None
    driver: Optional[Driver] = None
    status: Optional[BusStatus] = None

    @field_validator("operating_days")
    @classmethod
    def check_operating_days(cls, v):
        return _check_days(v)


def bus_to_doc(bus_in: BaseModel, exclude_unset: bool = False) -> dict:
    doc = bus_in.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)
    if doc.get("bus_number"):
        doc["bus_number"] = doc["bus_number"].upper()
    if doc.get("route"):
        doc["route"] = {k: v.strip() for k, v in doc["route"].items()}
    return doc
