from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from parkflow.core.entities.reservation import billable_hours


class VehicleType(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    BICYCLE = "bicycle"
    TRUCK = "truck"


@dataclass(frozen=True, slots=True)
class ParkingLocation:
    id: str
    name: str
    address: str
    capacity: int
    latitude: float | None = None
    longitude: float | None = None

    def to_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ParkingSpace:
    id: str
    code: str
    location_id: str
    is_available: bool

    def to_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ParkingRate:
    id: str
    name: str
    hourly_rate: float
    daily_rate: float
    vehicle_type: VehicleType

    def to_record(self) -> dict[str, Any]:
        record = asdict(self)
        record["vehicle_type"] = self.vehicle_type.value
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ParkingRate:
        return cls(
            id=record["id"],
            name=record["name"],
            hourly_rate=record["hourly_rate"],
            daily_rate=record["daily_rate"],
            vehicle_type=VehicleType(record["vehicle_type"]),
        )

    def quote(self, start_time: str, end_time: str) -> float:
        """
        Price of a reservation window: hourly rate per started hour.

        Each started day is capped at this rate's `daily_rate`; hours alone only
        give the hourly total, the cap is a pricing rule of this catalog.
        """
        hours = billable_hours(start_time, end_time)
        full_days, remaining_hours = divmod(hours, 24)
        return full_days * self.daily_rate + min(remaining_hours * self.hourly_rate, self.daily_rate)
