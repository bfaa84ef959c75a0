from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from parkflow.core.entities.reservation import NewReservation, Reservation


class ReservationStoreError(Exception):
    """
    Base class for failures surfaced by reservation repositories.

    `fallback_attempted` is set when the error was raised by the local store while
    retrying an operation the remote store could not serve.
    """

    fallback_attempted: bool = False


class ReservationNotFoundError(ReservationStoreError):
    """Raise to map to HTTP 404."""


class RemoteStoreError(ReservationStoreError):
    pass


class RemoteFailure(str, Enum):
    MISSING_TABLE = "missing_table"
    UNREACHABLE = "unreachable"


class RemoteUnavailableError(RemoteStoreError):
    """The remote store cannot serve requests at all (schema absent, network down)."""

    def __init__(self, reason: RemoteFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class RemoteRejectedError(RemoteStoreError):
    """The remote store is up but refused this particular request."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ReservationRepository(ABC):
    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[Reservation]:
        """Reservations owned by `user_id`, most recent start first."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self) -> list[Reservation]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, new: NewReservation) -> Reservation:
        raise NotImplementedError

    @abstractmethod
    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, reservation_id: str) -> None:
        raise NotImplementedError
