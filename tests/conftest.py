import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from beauty_studio.core.config import settings
from beauty_studio.core.config_loader import load_studio_config
from beauty_studio.core.errors import ConflictError, StoreError
from beauty_studio.models.booking import ACTIVE_STATUSES

ROOT = Path(__file__).resolve().parent.parent
settings.STUDIO_CONFIG_PATH = str(ROOT / "data" / "studio_config.json")


class InMemoryBookingStore:
    """
    Stand-in for DBService with the same coroutine interface.
    Emulates the partial unique index on active (date, time) pairs.
    """

    def __init__(self):
        self.rows = {}
        self.fail = False
        # when True, find_active never sees anything (simulates the race window)
        self.blind_reads = False

    def _check(self):
        if self.fail:
            raise StoreError("connection refused")

    def _slot_taken(self, day: str, time: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            r["date"] == day and r["time"] == time and r["status"] in ACTIVE_STATUSES and r["id"] != exclude_id
            for r in self.rows.values()
        )

    async def find_active(self, day: str, time: str) -> Optional[dict]:
        self._check()
        if self.blind_reads:
            return None
        for row in self.rows.values():
            if row["date"] == day and row["time"] == time and row["status"] in ACTIVE_STATUSES:
                return dict(row)
        return None

    async def list_active_on_date(self, day: str) -> List[dict]:
        self._check()
        rows = [dict(r) for r in self.rows.values() if r["date"] == day and r["status"] in ACTIVE_STATUSES]
        return sorted(rows, key=lambda r: r["time"])

    async def insert_booking(self, record: dict) -> dict:
        self._check()
        if record["status"] in ACTIVE_STATUSES and self._slot_taken(record["date"], record["time"]):
            raise ConflictError()
        now = datetime.now(timezone.utc).isoformat()
        row = dict(record, id=str(uuid.uuid4()), created_at=now, updated_at=now)
        self.rows[row["id"]] = row
        return dict(row)

    async def list_bookings(self) -> List[dict]:
        self._check()
        return [dict(r) for r in sorted(self.rows.values(), key=lambda r: (r["date"], r["time"]))]

    async def get_booking(self, booking_id: str) -> Optional[dict]:
        self._check()
        row = self.rows.get(booking_id)
        return dict(row) if row else None

    async def list_active_in_range(self, start: str, end: str) -> List[dict]:
        self._check()
        rows = [
            dict(r) for r in self.rows.values()
            if start <= r["date"] <= end and r["status"] in ACTIVE_STATUSES
        ]
        return sorted(rows, key=lambda r: (r["date"], r["time"]))

    async def update_status(self, booking_id: str, status: str) -> Optional[dict]:
        self._check()
        row = self.rows.get(booking_id)
        if not row:
            return None
        if status in ACTIVE_STATUSES and self._slot_taken(row["date"], row["time"], exclude_id=booking_id):
            raise ConflictError()
        row["status"] = status
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        return dict(row)

    def add(self, day: str, time: str, status: str = "pending", **extra) -> dict:
        """Seed a row directly, bypassing every check."""
        now = datetime.now(timezone.utc).isoformat()
        row = {
            "id": str(uuid.uuid4()),
            "service_id": "daily",
            "date": day,
            "time": time,
            "client_name": "Maria Ivanova",
            "client_email": "maria@example.com",
            "client_phone": "+359888123456",
            "notes": None,
            "status": status,
            "created_at": now,
            "updated_at": now,
        }
        row.update(extra)
        self.rows[row["id"]] = row
        return dict(row)


@pytest.fixture
def studio_config():
    return load_studio_config(settings.STUDIO_CONFIG_PATH)


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def booking_service(store, studio_config):
    from beauty_studio.services.booking_service import BookingService
    return BookingService(store=store, config=studio_config)


@pytest.fixture
def client(booking_service):
    from beauty_studio.main import app
    from beauty_studio.services.booking_service import get_booking_service

    app.dependency_overrides[get_booking_service] = lambda: booking_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/login",
        json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def booking_payload():
    return {
        "serviceId": "bridal",
        "date": "2025-04-10",
        "time": "10:00",
        "clientName": "Elena Petrova",
        "clientEmail": "elena@example.com",
        "clientPhone": "+359888000111",
        "notes": "Wedding at 14:00",
    }
