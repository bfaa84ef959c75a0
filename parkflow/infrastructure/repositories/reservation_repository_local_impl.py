from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from loguru import logger

from parkflow.core.entities.reservation import (
    NewReservation,
    Reservation,
    ReservationStatus,
    normalize_changes,
    to_utc_iso,
    utc_now_iso,
)
from parkflow.core.repositories.reservation_repository import ReservationNotFoundError, ReservationRepository
from parkflow.infrastructure.models.models import SlotStore

RESERVATIONS_KEY = "reservations"
DEMO_USER_ID = "demo-user"


class LocalReservationRepositoryImpl(ReservationRepository):
    """
    Reservation repository emulating the remote table in a persisted slot.

    Every operation reads the whole collection and writes it back whole.
    The first list against an empty collection seeds two demo reservations.
    """

    def __init__(self, store: SlotStore) -> None:
        self._store = store

    async def list_by_user(self, user_id: str) -> list[Reservation]:
        self._ensure_seed(user_id)
        return _newest_first(r for r in self._read() if r.user_id == user_id)

    async def list_all(self) -> list[Reservation]:
        self._ensure_seed(None)
        return _newest_first(self._read())

    async def create(self, new: NewReservation) -> Reservation:
        now = utc_now_iso()
        reservation = Reservation(
            id=str(uuid4()),
            user_id=new.user_id,
            location_name=new.location_name,
            space_code=new.space_code,
            start_time=new.start_time,
            end_time=new.end_time,
            status=ReservationStatus(new.status),
            amount=new.amount,
            notes=new.notes,
            created_at=now,
            updated_at=now,
        )
        reservations = self._read()
        reservations.append(reservation)
        self._write(reservations)
        return reservation

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        changes = normalize_changes(changes)
        reservations = self._read()
        for index, current in enumerate(reservations):
            if current.id == reservation_id:
                updated = current.merged(changes, updated_at=utc_now_iso())
                reservations[index] = updated
                self._write(reservations)
                return updated
        raise ReservationNotFoundError(f"Reservation not found: {reservation_id!r}")

    async def delete(self, reservation_id: str) -> None:
        self._write([r for r in self._read() if r.id != reservation_id])

    # -----------------------------
    # Internal helpers
    # -----------------------------
    def _read(self) -> list[Reservation]:
        return [Reservation.from_record(record) for record in self._store.read_records(RESERVATIONS_KEY)]

    def _write(self, reservations: list[Reservation]) -> None:
        self._store.write_records(RESERVATIONS_KEY, [r.to_record() for r in reservations])

    def _ensure_seed(self, user_id: str | None) -> None:
        if self._store.read_records(RESERVATIONS_KEY):
            return

        owner = user_id or DEMO_USER_ID
        logger.info("[reservations] seeding local store for {}", owner)
        self._write(_demo_reservations(owner, datetime.now(timezone.utc)))


def _newest_first(reservations) -> list[Reservation]:
    return sorted(reservations, key=lambda r: r.start_time, reverse=True)


def _demo_reservations(owner: str, now: datetime) -> list[Reservation]:
    created = to_utc_iso(now)
    tomorrow = now + timedelta(days=1)
    return [
        Reservation(
            id=str(uuid4()),
            user_id=owner,
            location_name="Parqueadero Centro",
            space_code="A-12",
            start_time=to_utc_iso(now),
            end_time=to_utc_iso(now + timedelta(hours=2)),
            status=ReservationStatus.ACTIVE,
            amount=8000,
            notes="Sample reservation",
            created_at=created,
            updated_at=created,
        ),
        Reservation(
            id=str(uuid4()),
            user_id=owner,
            location_name="Centro Comercial Plaza",
            space_code="B-03",
            start_time=to_utc_iso(tomorrow),
            end_time=to_utc_iso(tomorrow + timedelta(hours=2)),
            status=ReservationStatus.COMPLETED,
            amount=7000,
            notes=None,
            created_at=created,
            updated_at=created,
        ),
    ]
