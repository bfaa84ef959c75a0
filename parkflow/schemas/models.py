from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class Status(Enum):
    active = 'active'
    completed = 'completed'
    cancelled = 'cancelled'


class VehicleType(Enum):
    car = 'car'
    motorcycle = 'motorcycle'
    bicycle = 'bicycle'
    truck = 'truck'


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class Reservation(BaseModel):
    id: str
    user_id: str
    location_name: str
    space_code: str | None
    start_time: str
    end_time: str
    status: Status
    amount: float | None
    notes: str | None
    created_at: str
    updated_at: str


class ReservationCreate(BaseModel):
    user_id: str = Field(min_length=1)
    location_name: str = Field(min_length=1)
    space_code: str | None = None
    start_time: datetime
    end_time: datetime
    status: Status = Status.active
    amount: float | None = Field(default=None, ge=0)
    notes: str | None = None

    @model_validator(mode='after')
    def check_window(self) -> ReservationCreate:
        if _as_utc(self.start_time) >= _as_utc(self.end_time):
            raise ValueError('start_time must be before end_time')
        return self


class ReservationUpdate(BaseModel):
    location_name: str | None = Field(default=None, min_length=1)
    space_code: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: Status | None = None
    amount: float | None = Field(default=None, ge=0)
    notes: str | None = None

    @model_validator(mode='after')
    def check_window(self) -> ReservationUpdate:
        if self.start_time is not None and self.end_time is not None:
            if _as_utc(self.start_time) >= _as_utc(self.end_time):
                raise ValueError('start_time must be before end_time')
        return self


class StoreModeStatus(BaseModel):
    local_mode: bool


class ParkingLocation(BaseModel):
    id: str
    name: str
    address: str
    capacity: int
    latitude: float | None
    longitude: float | None


class ParkingSpace(BaseModel):
    id: str
    code: str
    location_id: str
    is_available: bool


class ParkingRate(BaseModel):
    id: str
    name: str
    hourly_rate: float
    daily_rate: float
    vehicle_type: VehicleType


class Quote(BaseModel):
    rate_id: str
    hours: int
    amount: float
