from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Fields a caller may patch through update(); id and created_at never change.
UPDATABLE_FIELDS = frozenset(
    {
        "user_id",
        "location_name",
        "space_code",
        "start_time",
        "end_time",
        "status",
        "amount",
        "notes",
    }
)


def to_utc_iso(value: datetime) -> str:
    """
    Fixed-width UTC ISO-8601 form; naive values are taken as UTC.

    Stored timestamps all use this form so that ordering them as text matches
    ordering them in time.
    """
    return _as_utc(value).astimezone(timezone.utc).isoformat(timespec="seconds")


def utc_now_iso() -> str:
    return to_utc_iso(datetime.now(timezone.utc))


def billable_hours(start_time: str, end_time: str) -> int:
    """
    Whole hours between two ISO-8601 timestamps, rounded up. Never negative.
    """
    start = _as_utc(datetime.fromisoformat(start_time))
    end = _as_utc(datetime.fromisoformat(end_time))
    seconds = max(0.0, (end - start).total_seconds())
    return math.ceil(seconds / 3600)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(slots=True)
class NewReservation:
    user_id: str
    location_name: str
    start_time: str
    end_time: str
    space_code: str | None = None
    status: ReservationStatus = ReservationStatus.ACTIVE
    amount: float | None = None
    notes: str | None = None


@dataclass(slots=True)
class Reservation:
    id: str
    user_id: str
    location_name: str
    start_time: str
    end_time: str
    status: ReservationStatus
    created_at: str
    updated_at: str
    space_code: str | None = None
    amount: float | None = None
    notes: str | None = None

    def to_record(self) -> dict[str, Any]:
        record = asdict(self)
        record["status"] = self.status.value
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Reservation:
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            location_name=record["location_name"],
            start_time=record["start_time"],
            end_time=record["end_time"],
            status=ReservationStatus(record["status"]),
            created_at=record["created_at"],
            updated_at=record["updated_at"],
            space_code=record.get("space_code"),
            amount=record.get("amount"),
            notes=record.get("notes"),
        )

    def merged(self, changes: dict[str, Any], *, updated_at: str) -> Reservation:
        """
        Shallow merge of `changes` into a copy of this reservation.
        """
        record = self.to_record()
        record.update(changes)
        record["updated_at"] = updated_at
        return Reservation.from_record(record)


def normalize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Raises ValueError on fields that cannot be patched."""

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update reservation fields: {sorted(unknown)}")

    normalized = dict(changes)
    if "status" in normalized:
        normalized["status"] = ReservationStatus(normalized["status"]).value
    return normalized
