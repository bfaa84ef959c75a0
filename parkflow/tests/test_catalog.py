from __future__ import annotations

import random

import pytest

from parkflow.core.entities.catalog import ParkingRate, VehicleType
from parkflow.core.entities.reservation import billable_hours
from parkflow.infrastructure.models.models import SlotStore
from parkflow.infrastructure.repositories.catalog_repository_local_impl import (
    LOCATIONS_KEY,
    LocalCatalogRepositoryImpl,
)


@pytest.fixture()
def catalog(slot_store: SlotStore) -> LocalCatalogRepositoryImpl:
    return LocalCatalogRepositoryImpl(slot_store, rng=random.Random(7))


async def test_catalog_is_seeded_once(catalog: LocalCatalogRepositoryImpl, slot_store: SlotStore) -> None:
    first = await catalog.list_locations()
    second = await catalog.list_locations()

    assert len(first) == 3
    assert [loc.id for loc in first] == [loc.id for loc in second]
    assert len(slot_store.read_records(LOCATIONS_KEY)) == 3


async def test_spaces_belong_to_their_location(catalog: LocalCatalogRepositoryImpl) -> None:
    location = (await catalog.list_locations())[0]

    spaces = await catalog.list_spaces(location.id)

    assert len(spaces) == 12
    assert {s.location_id for s in spaces} == {location.id}
    assert [s.code for s in spaces[:4]] == ["A-01", "B-02", "C-03", "A-04"]
    assert await catalog.list_spaces("unknown-location") == []


async def test_rates_and_lookup(catalog: LocalCatalogRepositoryImpl) -> None:
    rates = await catalog.list_rates()

    assert {r.vehicle_type for r in rates} == {VehicleType.CAR, VehicleType.MOTORCYCLE}
    assert await catalog.get_rate(rates[1].id) == rates[1]
    assert await catalog.get_rate("nope") is None


@pytest.mark.parametrize(
    ("start", "end", "hours"),
    [
        ("2025-01-01T10:00", "2025-01-01T11:00", 1),
        ("2025-01-01T10:00", "2025-01-01T11:01", 2),
        ("2025-01-01T10:00", "2025-01-01T09:00", 0),
        ("2025-01-01T10:00:00+00:00", "2025-01-01T12:30:00+00:00", 3),
    ],
)
def test_billable_hours_round_up(start: str, end: str, hours: int) -> None:
    assert billable_hours(start, end) == hours


def test_quote_caps_each_started_day_at_daily_rate() -> None:
    rate = ParkingRate(id="r", name="Standard", hourly_rate=4000, daily_rate=25000, vehicle_type=VehicleType.CAR)

    assert rate.quote("2025-01-01T10:00", "2025-01-01T12:00") == 8000
    assert rate.quote("2025-01-01T00:00", "2025-01-01T10:00") == 25000
    assert rate.quote("2025-01-01T00:00", "2025-01-02T02:00") == 25000 + 8000
