from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from parkflow.core.entities.reservation import NewReservation, Reservation
from parkflow.core.repositories.reservation_repository import ReservationRepository
from parkflow.infrastructure.database import build_engine
from parkflow.infrastructure.models.models import SlotStore
from parkflow.infrastructure.repositories.reservation_repository_local_impl import LocalReservationRepositoryImpl


class ScriptedRemoteRepository(ReservationRepository):
    """
    Remote stand-in backed by its own local store.

    While `failure` is set every call raises it; `calls` records the operations it was asked to serve.
    """

    def __init__(self, directory: Path) -> None:
        self._backing = LocalReservationRepositoryImpl(SlotStore(directory))
        self.failure: Exception | None = None
        self.calls: list[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.failure is not None:
            raise self.failure

    async def list_by_user(self, user_id: str) -> list[Reservation]:
        self._check("list_by_user")
        return await self._backing.list_by_user(user_id)

    async def list_all(self) -> list[Reservation]:
        self._check("list_all")
        return await self._backing.list_all()

    async def create(self, new: NewReservation) -> Reservation:
        self._check("create")
        return await self._backing.create(new)

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        self._check("update")
        return await self._backing.update(reservation_id, changes)

    async def delete(self, reservation_id: str) -> None:
        self._check("delete")
        await self._backing.delete(reservation_id)


@pytest.fixture()
def slot_store(tmp_path: Path) -> SlotStore:
    return SlotStore(tmp_path / "local")


@pytest.fixture()
def local_repo(slot_store: SlotStore) -> LocalReservationRepositoryImpl:
    return LocalReservationRepositoryImpl(slot_store)


@pytest.fixture()
def remote_repo(tmp_path: Path) -> ScriptedRemoteRepository:
    return ScriptedRemoteRepository(tmp_path / "remote")


@pytest.fixture()
async def sqlite_engine() -> AsyncEngine:
    engine = build_engine("sqlite+aiosqlite://")
    yield engine
    await engine.dispose()


@pytest.fixture()
def make_new_reservation():
    def _make_new_reservation(**overrides: Any) -> NewReservation:
        base: dict[str, Any] = {
            "user_id": "u1",
            "location_name": "Lot A",
            "start_time": "2025-01-01T10:00",
            "end_time": "2025-01-01T11:00",
        }
        base.update(overrides)
        return NewReservation(**base)

    return _make_new_reservation
