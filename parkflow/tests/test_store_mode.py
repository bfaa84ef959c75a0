from __future__ import annotations

from pathlib import Path

import pytest

from parkflow.core.entities.store_mode import StoreMode
from parkflow.infrastructure.config import Settings
from parkflow.services.parking_service import build_reservation_store


@pytest.mark.parametrize(
    ("local_only", "remote_url", "expected_local"),
    [
        (False, "sqlite+aiosqlite:///./parkflow.db", False),
        (True, "sqlite+aiosqlite:///./parkflow.db", True),
        (False, None, True),
        (False, "", True),
    ],
)
def test_initial_mode_comes_from_configuration(local_only: bool, remote_url: str | None, expected_local: bool) -> None:
    mode = StoreMode.from_config(local_only=local_only, remote_url=remote_url)
    assert mode.is_local_mode() is expected_local


def test_force_local_mode_is_idempotent_and_one_way() -> None:
    mode = StoreMode(local=False)

    mode.force_local_mode()
    mode.force_local_mode()

    assert mode.is_local_mode() is True


def test_store_built_from_local_only_settings_never_builds_remote(tmp_path) -> None:
    config = Settings(local_only=True, database_url="sqlite+aiosqlite://", local_store_dir=tmp_path)

    store = build_reservation_store(config)

    assert store.mode.is_local_mode() is True


def test_store_built_with_database_url_starts_remote(tmp_path) -> None:
    config = Settings(database_url="sqlite+aiosqlite://", local_store_dir=tmp_path)

    store = build_reservation_store(config)

    assert store.mode.is_local_mode() is False


def test_local_store_dir_defaults_to_working_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PARKFLOW_LOCAL_STORE_DIR", raising=False)

    assert Settings().local_store_dir == Path("local_store")
