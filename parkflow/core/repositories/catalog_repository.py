from __future__ import annotations

from abc import ABC, abstractmethod

from parkflow.core.entities.catalog import ParkingLocation, ParkingRate, ParkingSpace


class CatalogRepository(ABC):
    @abstractmethod
    async def list_locations(self) -> list[ParkingLocation]:
        raise NotImplementedError

    @abstractmethod
    async def list_spaces(self, location_id: str) -> list[ParkingSpace]:
        raise NotImplementedError

    @abstractmethod
    async def list_rates(self) -> list[ParkingRate]:
        raise NotImplementedError

    async def get_rate(self, rate_id: str) -> ParkingRate | None:
        for rate in await self.list_rates():
            if rate.id == rate_id:
                return rate
        return None
