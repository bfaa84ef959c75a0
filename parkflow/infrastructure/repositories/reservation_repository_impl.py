from __future__ import annotations

import re
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parkflow.core.entities.reservation import (
    NewReservation,
    Reservation,
    ReservationStatus,
    normalize_changes,
    utc_now_iso,
)
from parkflow.core.repositories.reservation_repository import (
    RemoteFailure,
    RemoteRejectedError,
    RemoteUnavailableError,
    ReservationRepository,
)
from parkflow.infrastructure.models.models import ReservationModel

# SQLSTATE codes: undefined_table, invalid_schema_name, connection exception class
_MISSING_TABLE_SQLSTATES = {"42P01", "3F000"}
_UNREACHABLE_SQLSTATE_PREFIX = "08"

_MISSING_TABLE_MESSAGE = re.compile(r"no such table|relation .* does not exist|schema cache")
_UNREACHABLE_MESSAGES = ("unable to open database file", "connection refused", "could not connect")


def classify_remote_error(exc: BaseException) -> RemoteFailure | None:
    """
    Map a driver/transport error onto the failures that make the remote store unusable.

    Returns None for errors that only concern the request at hand.
    """
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return RemoteFailure.UNREACHABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return RemoteFailure.UNREACHABLE

    orig = getattr(exc, "orig", None)
    if isinstance(orig, (ConnectionError, TimeoutError)):
        return RemoteFailure.UNREACHABLE

    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _MISSING_TABLE_SQLSTATES:
        return RemoteFailure.MISSING_TABLE
    if isinstance(sqlstate, str) and sqlstate.startswith(_UNREACHABLE_SQLSTATE_PREFIX):
        return RemoteFailure.UNREACHABLE

    if sqlstate is not None:
        return None

    # Drivers without SQLSTATE (sqlite) only report the condition in the message
    message = str(orig if orig is not None else exc).lower()
    if _MISSING_TABLE_MESSAGE.search(message):
        return RemoteFailure.MISSING_TABLE
    if any(m in message for m in _UNREACHABLE_MESSAGES):
        return RemoteFailure.UNREACHABLE
    return None


def _to_store_error(exc: Exception) -> Exception:
    reason = classify_remote_error(exc)
    if reason is not None:
        return RemoteUnavailableError(reason, str(exc))
    return RemoteRejectedError(str(exc))


def _to_entity(row: ReservationModel) -> Reservation:
    return Reservation(
        id=row.id,
        user_id=row.user_id,
        location_name=row.location_name,
        space_code=row.space_code,
        start_time=row.start_time,
        end_time=row.end_time,
        status=ReservationStatus(row.status),
        amount=row.amount,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlReservationRepositoryImpl(ReservationRepository):
    """
    Remote reservation repository over the `reservations` table.

    Driver and transport errors leave this class only as RemoteUnavailableError
    or RemoteRejectedError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_by_user(self, user_id: str) -> list[Reservation]:
        stmt = (
            select(ReservationModel)
            .where(ReservationModel.user_id == user_id)
            .order_by(ReservationModel.start_time.desc())
        )
        return await self._select(stmt)

    async def list_all(self) -> list[Reservation]:
        return await self._select(select(ReservationModel).order_by(ReservationModel.start_time.desc()))

    async def create(self, new: NewReservation) -> Reservation:
        row = ReservationModel(
            user_id=new.user_id,
            location_name=new.location_name,
            space_code=new.space_code,
            start_time=new.start_time,
            end_time=new.end_time,
            status=ReservationStatus(new.status).value,
            amount=new.amount,
            notes=new.notes,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                return _to_entity(row)
        except (SQLAlchemyError, OSError) as e:
            raise _to_store_error(e) from e

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        values = normalize_changes(changes)
        values["updated_at"] = utc_now_iso()
        stmt = (
            update(ReservationModel)
            .where(ReservationModel.id == reservation_id)
            .values(**values)
            .returning(ReservationModel)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalars().one_or_none()
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise _to_store_error(e) from e

        if row is None:
            raise RemoteRejectedError(
                f"Update matched no rows for reservation {reservation_id!r}",
                code="no_rows",
            )
        return _to_entity(row)

    async def delete(self, reservation_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(ReservationModel).where(ReservationModel.id == reservation_id))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise _to_store_error(e) from e

    async def _select(self, stmt) -> list[Reservation]:
        try:
            async with self._session_factory() as session:
                rows = (await session.scalars(stmt)).all()
        except (SQLAlchemyError, OSError) as e:
            raise _to_store_error(e) from e
        return [_to_entity(row) for row in rows]
