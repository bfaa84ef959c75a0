from __future__ import annotations

import json

import pytest

from parkflow.core.entities.reservation import ReservationStatus
from parkflow.core.repositories.reservation_repository import ReservationNotFoundError
from parkflow.infrastructure.models.models import SlotStore
from parkflow.infrastructure.repositories.reservation_repository_local_impl import (
    DEMO_USER_ID,
    RESERVATIONS_KEY,
    LocalReservationRepositoryImpl,
)


async def test_first_read_seeds_one_active_and_one_completed_for_the_user(local_repo) -> None:
    first = await local_repo.list_by_user("u1")

    assert len(first) == 2
    assert {r.user_id for r in first} == {"u1"}
    assert sorted(r.status for r in first) == sorted([ReservationStatus.ACTIVE, ReservationStatus.COMPLETED])

    # A second read must not seed again
    second = await local_repo.list_by_user("u1")
    assert [r.id for r in second] == [r.id for r in first]


async def test_list_all_seeds_for_placeholder_user(local_repo) -> None:
    reservations = await local_repo.list_all()

    assert len(reservations) == 2
    assert {r.user_id for r in reservations} == {DEMO_USER_ID}


async def test_seeding_is_retriggered_once_the_store_is_emptied(local_repo, slot_store: SlotStore) -> None:
    seeded = await local_repo.list_all()
    for reservation in seeded:
        await local_repo.delete(reservation.id)
    assert slot_store.read_records(RESERVATIONS_KEY) == []

    reseeded = await local_repo.list_by_user("u2")
    assert len(reseeded) == 2
    assert not {r.id for r in reseeded} & {r.id for r in seeded}


async def test_create_defaults_status_and_stamps_timestamps(local_repo, make_new_reservation) -> None:
    created = await local_repo.create(make_new_reservation())

    assert created.id
    assert created.status is ReservationStatus.ACTIVE
    assert created.created_at == created.updated_at
    assert created.space_code is None
    assert created.amount is None


async def test_created_ids_are_unique(local_repo, make_new_reservation) -> None:
    ids = [(await local_repo.create(make_new_reservation())).id for _ in range(25)]
    assert len(set(ids)) == len(ids)


async def test_create_into_empty_store_does_not_seed(local_repo, make_new_reservation) -> None:
    created = await local_repo.create(make_new_reservation())

    mine = await local_repo.list_by_user("u1")
    assert [r.id for r in mine] == [created.id]


async def test_results_are_sorted_by_descending_start_time(local_repo, make_new_reservation) -> None:
    await local_repo.list_all()
    for start in ("2024-05-01T08:00", "2031-01-01T08:00", "2027-03-15T12:30"):
        await local_repo.create(make_new_reservation(user_id=DEMO_USER_ID, start_time=start, end_time=start))

    for listing in (await local_repo.list_all(), await local_repo.list_by_user(DEMO_USER_ID)):
        starts = [r.start_time for r in listing]
        assert all(a >= b for a, b in zip(starts, starts[1:]))
    assert (await local_repo.list_all())[0].start_time == "2031-01-01T08:00"


async def test_update_merges_fields_and_refreshes_updated_at(local_repo, make_new_reservation) -> None:
    created = await local_repo.create(make_new_reservation(notes="first"))

    updated = await local_repo.update(created.id, {"space_code": "C-07", "amount": 12000})

    assert updated.id == created.id
    assert updated.space_code == "C-07"
    assert updated.amount == 12000
    assert updated.notes == "first"
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at

    persisted = await local_repo.list_by_user("u1")
    assert persisted[0].space_code == "C-07"


async def test_update_of_missing_id_raises_not_found(local_repo) -> None:
    with pytest.raises(ReservationNotFoundError):
        await local_repo.update("missing", {"notes": "x"})


async def test_update_rejects_immutable_fields(local_repo, make_new_reservation) -> None:
    created = await local_repo.create(make_new_reservation())

    with pytest.raises(ValueError):
        await local_repo.update(created.id, {"created_at": "1999-01-01T00:00:00"})


async def test_delete_removes_record_and_is_idempotent(local_repo, make_new_reservation) -> None:
    created = await local_repo.create(make_new_reservation())

    await local_repo.delete(created.id)
    await local_repo.delete(created.id)
    await local_repo.delete("never-existed")

    assert created.id not in {r.id for r in await local_repo.list_all()}
    assert created.id not in {r.id for r in await local_repo.list_by_user("u1")}


async def test_collection_is_persisted_as_json_array(slot_store: SlotStore, make_new_reservation) -> None:
    created = await LocalReservationRepositoryImpl(slot_store).create(make_new_reservation())

    raw = slot_store.get(RESERVATIONS_KEY)
    assert raw is not None
    records = json.loads(raw)
    assert records[0]["id"] == created.id
    assert records[0]["status"] == "active"

    # A fresh repository over the same slots sees the same data
    reopened = LocalReservationRepositoryImpl(slot_store)
    assert [r.id for r in await reopened.list_by_user("u1")] == [created.id]
