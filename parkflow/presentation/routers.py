from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from parkflow.core.repositories.catalog_repository import CatalogRepository
from parkflow.core.repositories.reservation_repository import (
    RemoteRejectedError,
    RemoteUnavailableError,
    ReservationNotFoundError,
    ReservationStoreError,
)
from parkflow.core.use_cases.reservation_store import ReservationStore
from parkflow.schemas.models import (
    ParkingLocation,
    ParkingRate,
    ParkingSpace,
    Quote,
    Reservation,
    ReservationCreate,
    ReservationUpdate,
    StoreModeStatus,
)
from parkflow.services.parking_service import (
    RateNotFoundError,
    cancel_reservation_service,
    create_reservation_service,
    delete_reservation_service,
    get_catalog_repository,
    get_reservation_store,
    list_all_reservations_service,
    list_locations_service,
    list_my_reservations_service,
    list_rates_service,
    list_spaces_service,
    quote_service,
    update_reservation_service,
)

router = APIRouter()


def get_store() -> ReservationStore:
    return get_reservation_store()


def get_catalog() -> CatalogRepository:
    return get_catalog_repository()


def _http_error(e: ReservationStoreError) -> HTTPException:
    if isinstance(e, ReservationNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, RemoteRejectedError):
        if e.code == "no_rows":
            return HTTPException(status_code=404, detail=str(e))
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, RemoteUnavailableError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.get("/reservations", response_model=list[Reservation])
async def get_my_reservations(
    user_id: str = Query(min_length=1), store: ReservationStore = Depends(get_store)
) -> list[Reservation]:
    try:
        return await list_my_reservations_service(user_id, store)
    except ReservationStoreError as e:
        raise _http_error(e)


@router.get("/reservations/all", response_model=list[Reservation])
async def get_all_reservations(store: ReservationStore = Depends(get_store)) -> list[Reservation]:
    try:
        return await list_all_reservations_service(store)
    except ReservationStoreError as e:
        raise _http_error(e)


@router.post("/reservations", response_model=Reservation, status_code=201)
async def post_reservation(body: ReservationCreate, store: ReservationStore = Depends(get_store)) -> Reservation:
    try:
        return await create_reservation_service(body, store)
    except ReservationStoreError as e:
        raise _http_error(e)


@router.patch("/reservations/{reservation_id}", response_model=Reservation)
async def patch_reservation(
    reservation_id: str, body: ReservationUpdate, store: ReservationStore = Depends(get_store)
) -> Reservation:
    """
    Apply a partial update; only fields present in the body are changed.

    Returns:
      - 200 with the updated reservation
      - 404 if the reservation does not exist
      - 422 on validation error
    """
    try:
        return await update_reservation_service(reservation_id, body, store)
    except ReservationStoreError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/reservations/{reservation_id}/cancel", response_model=Reservation)
async def post_cancel_reservation(reservation_id: str, store: ReservationStore = Depends(get_store)) -> Reservation:
    try:
        return await cancel_reservation_service(reservation_id, store)
    except ReservationStoreError as e:
        raise _http_error(e)


@router.delete("/reservations/{reservation_id}", status_code=204, response_model=None)
async def delete_reservation(reservation_id: str, store: ReservationStore = Depends(get_store)) -> Response:
    try:
        await delete_reservation_service(reservation_id, store)
    except ReservationStoreError as e:
        raise _http_error(e)
    return Response(status_code=204)


@router.get("/store/mode", response_model=StoreModeStatus)
async def get_store_mode(store: ReservationStore = Depends(get_store)) -> StoreModeStatus:
    return StoreModeStatus(local_mode=store.mode.is_local_mode())


@router.get("/catalog/locations", response_model=list[ParkingLocation])
async def get_locations(catalog: CatalogRepository = Depends(get_catalog)) -> list[ParkingLocation]:
    return await list_locations_service(catalog)


@router.get("/catalog/locations/{location_id}/spaces", response_model=list[ParkingSpace])
async def get_spaces(location_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> list[ParkingSpace]:
    return await list_spaces_service(location_id, catalog)


@router.get("/catalog/rates", response_model=list[ParkingRate])
async def get_rates(catalog: CatalogRepository = Depends(get_catalog)) -> list[ParkingRate]:
    return await list_rates_service(catalog)


@router.get("/catalog/rates/{rate_id}/quote", response_model=Quote)
async def get_quote(
    rate_id: str,
    start_time: datetime,
    end_time: datetime,
    catalog: CatalogRepository = Depends(get_catalog),
) -> Quote:
    try:
        return await quote_service(rate_id, start_time, end_time, catalog)
    except RateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
