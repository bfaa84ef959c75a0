from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from parkflow.core.entities.reservation import NewReservation, Reservation, ReservationStatus
from parkflow.core.entities.store_mode import StoreMode
from parkflow.core.repositories.reservation_repository import (
    RemoteUnavailableError,
    ReservationRepository,
    ReservationStoreError,
)

T = TypeVar("T")


class ReservationStore:
    """
    Uniform reservation CRUD over a remote repository with a local fallback.

    Every call goes to the repository `mode` designates. When the remote repository
    raises RemoteUnavailableError the store latches local mode and retries the same
    operation once against the local repository. Other errors propagate untouched.
    """

    def __init__(
        self,
        *,
        mode: StoreMode,
        local_repo: ReservationRepository,
        remote_repo: ReservationRepository | None = None,
    ) -> None:
        self._mode = mode
        self._local_repo = local_repo
        self._remote_repo = remote_repo

        if remote_repo is None:
            mode.force_local_mode()

    @property
    def mode(self) -> StoreMode:
        return self._mode

    async def list_mine(self, user_id: str) -> list[Reservation]:
        if not user_id:
            raise ValueError("user_id must be a non-empty string")
        return await self._run("list_mine", lambda repo: repo.list_by_user(user_id))

    async def list_all(self) -> list[Reservation]:
        return await self._run("list_all", lambda repo: repo.list_all())

    async def create(self, new: NewReservation) -> Reservation:
        return await self._run("create", lambda repo: repo.create(new))

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        return await self._run("update", lambda repo: repo.update(reservation_id, changes))

    async def cancel(self, reservation_id: str) -> Reservation:
        return await self.update(reservation_id, {"status": ReservationStatus.CANCELLED})

    async def delete(self, reservation_id: str) -> None:
        await self._run("delete", lambda repo: repo.delete(reservation_id))

    # -----------------------------
    # Internal helpers
    # -----------------------------
    async def _run(self, operation: str, call: Callable[[ReservationRepository], Awaitable[T]]) -> T:
        if self._mode.is_local_mode():
            return await call(self._local_repo)

        try:
            return await call(self._remote_repo)
        except RemoteUnavailableError as remote_error:
            logger.warning(
                "[reservations] {} fell back to the local store ({}): {}",
                operation,
                remote_error.reason.value,
                remote_error,
            )
            self._mode.force_local_mode()
            try:
                return await call(self._local_repo)
            except ReservationStoreError as local_error:
                local_error.fallback_attempted = True
                raise local_error from remote_error
