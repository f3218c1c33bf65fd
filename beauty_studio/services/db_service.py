from datetime import datetime, timezone
from typing import List, Optional

from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client

from beauty_studio.core.config import settings
from beauty_studio.core.errors import ConflictError, StoreError
from beauty_studio.core.logger import logger
from beauty_studio.models.booking import ACTIVE_STATUSES

# Postgres error codes surfaced through PostgREST
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"


class DBService:
    """
    Booking Record Store on top of a Supabase table.

    Rows are plain dicts in store (snake_case) form. Every failure is raised
    as ``StoreError``; a violation of the active-slot unique index is raised
    as ``ConflictError``.
    """
    _instance = None
    _client: Optional[AsyncClient] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(DBService, cls).__new__(cls)
        return cls._instance

    @property
    def table_name(self) -> str:
        return settings.BOOKINGS_TABLE

    async def get_client(self) -> AsyncClient:
        if not self._client:
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                logger.error("❌ Supabase credentials missing (SUPABASE_URL / SUPABASE_KEY)")
                raise StoreError("Booking store is not configured")
            try:
                self._client = await create_async_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
                logger.info("✅ Supabase Async client initialized")
            except Exception as e:
                logger.error(f"❌ Failed to initialize Supabase Async: {e}")
                raise StoreError(f"Failed to connect to booking store: {e}") from e
        return self._client

    async def _table(self):
        client = await self.get_client()
        return client.table(self.table_name)

    async def find_active(self, day: str, time: str) -> Optional[dict]:
        """First pending/confirmed booking at (day, time), or None."""
        try:
            table = await self._table()
            response = await table.select("*")\
                .eq("date", day)\
                .eq("time", time)\
                .in_("status", list(ACTIVE_STATUSES))\
                .limit(1)\
                .execute()
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (find_active {day} {time}): {e}")
            raise StoreError(f"Failed to check availability: {e}") from e

        return response.data[0] if response.data else None

    async def list_active_on_date(self, day: str) -> List[dict]:
        try:
            table = await self._table()
            response = await table.select("*")\
                .eq("date", day)\
                .in_("status", list(ACTIVE_STATUSES))\
                .order("time")\
                .execute()
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (list_active_on_date {day}): {e}")
            raise StoreError(f"Failed to fetch bookings for {day}: {e}") from e
        return response.data or []

    async def insert_booking(self, record: dict) -> dict:
        try:
            table = await self._table()
            response = await table.insert(record).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning(f"⚠️ Slot {record.get('date')} {record.get('time')} taken (unique index)")
                raise ConflictError() from e
            logger.error(f"❌ DB Error (insert_booking): {e}")
            raise StoreError(f"Failed to create booking: {e}") from e
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (insert_booking): {e}")
            raise StoreError(f"Failed to create booking: {e}") from e

        if not response.data:
            raise StoreError("Booking store returned no row for insert")
        return response.data[0]

    async def list_bookings(self) -> List[dict]:
        try:
            table = await self._table()
            response = await table.select("*")\
                .order("date")\
                .order("time")\
                .execute()
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (list_bookings): {e}")
            raise StoreError(f"Failed to fetch bookings: {e}") from e
        return response.data or []

    async def get_booking(self, booking_id: str) -> Optional[dict]:
        try:
            table = await self._table()
            response = await table.select("*").eq("id", booking_id).limit(1).execute()
        except APIError as e:
            # malformed uuid
            if e.code == INVALID_TEXT_REPRESENTATION:
                return None
            logger.error(f"❌ DB Error (get_booking {booking_id}): {e}")
            raise StoreError(f"Failed to fetch booking: {e}") from e
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (get_booking {booking_id}): {e}")
            raise StoreError(f"Failed to fetch booking: {e}") from e
        return response.data[0] if response.data else None

    async def list_active_in_range(self, start: str, end: str) -> List[dict]:
        try:
            table = await self._table()
            response = await table.select("*")\
                .gte("date", start)\
                .lte("date", end)\
                .in_("status", list(ACTIVE_STATUSES))\
                .order("date")\
                .order("time")\
                .execute()
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (list_active_in_range {start}..{end}): {e}")
            raise StoreError(f"Failed to fetch bookings in date range: {e}") from e
        return response.data or []

    async def update_status(self, booking_id: str, status: str) -> Optional[dict]:
        """Returns the updated row, None when no row has this id."""
        payload = {"status": status, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            table = await self._table()
            response = await table.update(payload).eq("id", booking_id).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError() from e
            if e.code == INVALID_TEXT_REPRESENTATION:
                return None
            logger.error(f"❌ DB Error (update_status {booking_id}): {e}")
            raise StoreError(f"Failed to update booking: {e}") from e
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ DB Error (update_status {booking_id}): {e}")
            raise StoreError(f"Failed to update booking: {e}") from e

        if response.data:
            logger.info(f"✅ Booking {booking_id} status -> {status}")
            return response.data[0]
        return None

db_service = DBService()
