from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parkflow.core.entities.reservation import utc_now_iso
from parkflow.infrastructure.database import Base

_SLOT_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class SlotStore:
    """
    String-keyed, string-valued persisted slots, one file per key.

    Writes replace the whole value; there is no partial update.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def read_records(self, key: str) -> List[Dict[str, Any]]:
        raw = self.get(key)
        return json.loads(raw) if raw else []

    def write_records(self, key: str, records: List[Dict[str, Any]]) -> None:
        self.set(key, json.dumps(records))

    def _path(self, key: str) -> Path:
        if not _SLOT_KEY.match(key):
            raise ValueError(f"Invalid slot key: {key!r}")
        return self._directory / f"{key}.json"


class ReservationModel(Base):
    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    location_name: Mapped[str] = mapped_column(String, nullable=False)
    space_code: Mapped[str | None] = mapped_column(String, nullable=True)
    # ISO-8601 strings, same representation as the local store
    start_time: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    end_time: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False, default=utc_now_iso)
    updated_at: Mapped[str] = mapped_column(String(40), nullable=False, default=utc_now_iso, onupdate=utc_now_iso)
