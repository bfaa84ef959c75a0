from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from parkflow.core.entities.catalog import ParkingLocation as CoreParkingLocation
from parkflow.core.entities.catalog import ParkingRate as CoreParkingRate
from parkflow.core.entities.catalog import ParkingSpace as CoreParkingSpace
from parkflow.core.entities.reservation import NewReservation, ReservationStatus, billable_hours, to_utc_iso
from parkflow.core.entities.reservation import Reservation as CoreReservation
from parkflow.core.entities.store_mode import StoreMode
from parkflow.core.repositories.catalog_repository import CatalogRepository
from parkflow.core.use_cases.reservation_store import ReservationStore
from parkflow.infrastructure.config import Settings, settings
from parkflow.infrastructure.database import build_engine, build_session_factory
from parkflow.infrastructure.models.models import SlotStore
from parkflow.infrastructure.repositories.catalog_repository_local_impl import LocalCatalogRepositoryImpl
from parkflow.infrastructure.repositories.reservation_repository_impl import SqlReservationRepositoryImpl
from parkflow.infrastructure.repositories.reservation_repository_local_impl import LocalReservationRepositoryImpl
from parkflow.schemas.models import (
    ParkingLocation,
    ParkingRate,
    ParkingSpace,
    Quote,
    Reservation,
    ReservationCreate,
    ReservationUpdate,
)


class RateNotFoundError(Exception):
    """Raise to map to HTTP 404."""


def build_reservation_store(config: Settings, *, engine: AsyncEngine | None = None) -> ReservationStore:
    """
    Wire the reservation store for `config`.

    The remote repository is only built when the configuration allows remote mode.
    """
    mode = StoreMode.from_config(local_only=config.local_only, remote_url=config.database_url)
    local_repo = LocalReservationRepositoryImpl(SlotStore(config.local_store_dir))

    remote_repo = None
    if not mode.is_local_mode():
        engine = engine or build_engine(config.database_url)
        remote_repo = SqlReservationRepositoryImpl(build_session_factory(engine))

    return ReservationStore(mode=mode, local_repo=local_repo, remote_repo=remote_repo)


@lru_cache
def remote_engine() -> AsyncEngine | None:
    if settings.local_only or not settings.database_url:
        return None
    return build_engine(settings.database_url)


@lru_cache
def get_reservation_store() -> ReservationStore:
    return build_reservation_store(settings, engine=remote_engine())


@lru_cache
def get_catalog_repository() -> CatalogRepository:
    return LocalCatalogRepositoryImpl(SlotStore(settings.local_store_dir))


def _to_schema(reservation: CoreReservation) -> Reservation:
    return Reservation(**reservation.to_record())


def _to_new_reservation(body: ReservationCreate) -> NewReservation:
    return NewReservation(
        user_id=body.user_id,
        location_name=body.location_name,
        space_code=body.space_code,
        start_time=to_utc_iso(body.start_time),
        end_time=to_utc_iso(body.end_time),
        status=ReservationStatus(body.status.value),
        amount=body.amount,
        notes=body.notes,
    )


def _to_changes(body: ReservationUpdate) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True)
    # Explicit nulls only clear the optional columns
    for key in ("location_name", "start_time", "end_time", "status"):
        if key in changes and changes[key] is None:
            del changes[key]
    for key in ("start_time", "end_time"):
        if isinstance(changes.get(key), datetime):
            changes[key] = to_utc_iso(changes[key])
    if changes.get("status") is not None:
        changes["status"] = ReservationStatus(changes["status"].value)
    return changes


async def list_my_reservations_service(user_id: str, store: ReservationStore) -> list[Reservation]:
    return [_to_schema(r) for r in await store.list_mine(user_id)]


async def list_all_reservations_service(store: ReservationStore) -> list[Reservation]:
    return [_to_schema(r) for r in await store.list_all()]


async def create_reservation_service(body: ReservationCreate, store: ReservationStore) -> Reservation:
    return _to_schema(await store.create(_to_new_reservation(body)))


async def update_reservation_service(
    reservation_id: str, body: ReservationUpdate, store: ReservationStore
) -> Reservation:
    return _to_schema(await store.update(reservation_id, _to_changes(body)))


async def cancel_reservation_service(reservation_id: str, store: ReservationStore) -> Reservation:
    return _to_schema(await store.cancel(reservation_id))


async def delete_reservation_service(reservation_id: str, store: ReservationStore) -> None:
    await store.delete(reservation_id)


def _location_schema(location: CoreParkingLocation) -> ParkingLocation:
    return ParkingLocation(**asdict(location))


def _space_schema(space: CoreParkingSpace) -> ParkingSpace:
    return ParkingSpace(**asdict(space))


def _rate_schema(rate: CoreParkingRate) -> ParkingRate:
    return ParkingRate(**rate.to_record())


async def list_locations_service(catalog: CatalogRepository) -> list[ParkingLocation]:
    return [_location_schema(loc) for loc in await catalog.list_locations()]


async def list_spaces_service(location_id: str, catalog: CatalogRepository) -> list[ParkingSpace]:
    return [_space_schema(space) for space in await catalog.list_spaces(location_id)]


async def list_rates_service(catalog: CatalogRepository) -> list[ParkingRate]:
    return [_rate_schema(rate) for rate in await catalog.list_rates()]


async def quote_service(
    rate_id: str, start_time: datetime, end_time: datetime, catalog: CatalogRepository
) -> Quote:
    rate = await catalog.get_rate(rate_id)
    if rate is None:
        raise RateNotFoundError("Rate not found")

    start, end = to_utc_iso(start_time), to_utc_iso(end_time)
    return Quote(rate_id=rate.id, hours=billable_hours(start, end), amount=rate.quote(start, end))
