from __future__ import annotations

import random
import string
from uuid import uuid4

from parkflow.core.entities.catalog import ParkingLocation, ParkingRate, ParkingSpace, VehicleType
from parkflow.core.repositories.catalog_repository import CatalogRepository
from parkflow.infrastructure.models.models import SlotStore

LOCATIONS_KEY = "locations"
SPACES_KEY = "spaces"
RATES_KEY = "rates"

MAX_SPACES_PER_LOCATION = 12
SPACE_AVAILABILITY = 0.8


class LocalCatalogRepositoryImpl(CatalogRepository):
    """
    Read-only catalog of locations, spaces and rates seeded into persisted slots.
    """

    def __init__(self, store: SlotStore, *, rng: random.Random | None = None) -> None:
        self._store = store
        self._rng = rng or random.Random()

    async def list_locations(self) -> list[ParkingLocation]:
        self._ensure_seed()
        return [ParkingLocation(**record) for record in self._store.read_records(LOCATIONS_KEY)]

    async def list_spaces(self, location_id: str) -> list[ParkingSpace]:
        self._ensure_seed()
        return [
            ParkingSpace(**record)
            for record in self._store.read_records(SPACES_KEY)
            if record["location_id"] == location_id
        ]

    async def list_rates(self) -> list[ParkingRate]:
        self._ensure_seed()
        return [ParkingRate.from_record(record) for record in self._store.read_records(RATES_KEY)]

    def _ensure_seed(self) -> None:
        if not self._store.read_records(LOCATIONS_KEY):
            locations = _seed_locations()
            self._store.write_records(LOCATIONS_KEY, [loc.to_record() for loc in locations])
            spaces = [space for loc in locations for space in self._seed_spaces(loc)]
            self._store.write_records(SPACES_KEY, [space.to_record() for space in spaces])

        if not self._store.read_records(RATES_KEY):
            self._store.write_records(RATES_KEY, [rate.to_record() for rate in _seed_rates()])

    def _seed_spaces(self, location: ParkingLocation) -> list[ParkingSpace]:
        # Codes cycle through rows A-C: A-01, B-02, C-03, A-04, ...
        spaces = []
        for i in range(1, min(MAX_SPACES_PER_LOCATION, location.capacity) + 1):
            row = string.ascii_uppercase[(i - 1) % 3]
            spaces.append(
                ParkingSpace(
                    id=str(uuid4()),
                    code=f"{row}-{i:02d}",
                    location_id=location.id,
                    is_available=self._rng.random() < SPACE_AVAILABILITY,
                )
            )
        return spaces


def _seed_locations() -> list[ParkingLocation]:
    return [
        ParkingLocation(
            id=str(uuid4()),
            name="Centro Comercial Plaza",
            address="Av. Principal #123",
            capacity=80,
            latitude=4.65,
            longitude=-74.06,
        ),
        ParkingLocation(
            id=str(uuid4()),
            name="Parqueadero Central",
            address="Calle 45 #23-12",
            capacity=60,
            latitude=4.62,
            longitude=-74.07,
        ),
        ParkingLocation(
            id=str(uuid4()),
            name="Parqueadero Norte",
            address="Calle Norte #56-78",
            capacity=50,
            latitude=4.68,
            longitude=-74.04,
        ),
    ]


def _seed_rates() -> list[ParkingRate]:
    return [
        ParkingRate(id=str(uuid4()), name="Standard", hourly_rate=4000, daily_rate=25000, vehicle_type=VehicleType.CAR),
        ParkingRate(
            id=str(uuid4()),
            name="Motorcycle",
            hourly_rate=3000,
            daily_rate=15000,
            vehicle_type=VehicleType.MOTORCYCLE,
        ),
        ParkingRate(id=str(uuid4()), name="Premium", hourly_rate=7000, daily_rate=40000, vehicle_type=VehicleType.CAR),
    ]
