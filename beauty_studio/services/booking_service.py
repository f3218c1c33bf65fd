import asyncio
from typing import List, Optional

from beauty_studio.core.config_loader import get_time_slots, load_studio_config
from beauty_studio.core.dates import DateLike, normalize_date
from beauty_studio.core.errors import ConflictError, NotFoundError, ValidationError
from beauty_studio.core.logger import logger
from beauty_studio.models.booking import ACTIVE_STATUSES, Booking, BookingCreate, BookingStatus
from beauty_studio.services.db_service import db_service
from beauty_studio.services.notification_service import send_confirmation_email


def _normalize_or_400(value: DateLike, field: str = "date") -> str:
    try:
        return normalize_date(value)
    except ValueError as e:
        raise ValidationError("Invalid date", errors={field: str(e)}) from e


class BookingService:
    """
    Availability checks, booking creation, queries and status transitions.

    ``store`` is any object with the ``DBService`` coroutine interface; it
    defaults to the Supabase-backed singleton.
    """

    def __init__(self, store=None, config: Optional[dict] = None):
        self.store = store or db_service
        self.config = config if config is not None else load_studio_config()

    @property
    def time_slots(self) -> List[str]:
        return get_time_slots(self.config)

    # --- Availability ---

    async def find_conflict(self, day: DateLike, time: str) -> Optional[Booking]:
        """Active booking holding (day, time), or None. Store failures propagate."""
        formatted_date = _normalize_or_400(day)
        logger.debug(f"🔍 Checking availability for {formatted_date} {time}")
        row = await self.store.find_active(formatted_date, time)
        return Booking.model_validate(row) if row else None

    async def is_available(self, day: DateLike, time: str) -> bool:
        """
        True if no pending/confirmed booking holds the slot.
        Fails closed: if the store cannot be queried the slot is reported taken.
        """
        try:
            return await self.find_conflict(day, time) is None
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"❌ Availability check failed for {day} {time}, treating slot as taken: {e}")
            return False

    async def get_occupied_times(self, day: DateLike) -> List[str]:
        formatted_date = _normalize_or_400(day)
        rows = await self.store.list_active_on_date(formatted_date)
        return sorted({row["time"] for row in rows})

    # --- Writes ---

    async def create_booking(self, payload: BookingCreate) -> Booking:
        if payload.time not in self.time_slots:
            raise ValidationError(
                "Validation Error",
                errors={"time": f"{payload.time} is not a bookable time slot"},
            )

        logger.info(f"📥 Booking request - {payload.service_id.value} on {payload.date} at {payload.time}")

        # Re-check right before the insert; the unique index on active slots
        # catches whatever slips between this check and the write.
        existing = await self.find_conflict(payload.date, payload.time)
        if existing:
            logger.warning(f"⚠️ Time slot already booked: {payload.date} {payload.time} (booking {existing.id})")
            raise ConflictError()

        row = await self.store.insert_booking(payload.to_record())
        booking = Booking.model_validate(row)
        logger.info(f"✅ Booking created: {booking.id} ({booking.date} {booking.time})")
        return booking

    async def set_status(self, booking_id: str, new_status: str) -> Booking:
        valid = [status.value for status in BookingStatus]
        if new_status not in valid:
            raise ValidationError("Invalid status", errors={"status": f"Must be one of: {', '.join(valid)}"})

        current = await self.get_by_id(booking_id)

        # Reactivating a cancelled booking must not double-book its slot
        if new_status in ACTIVE_STATUSES and not current.is_active:
            holder = await self.find_conflict(current.date, current.time)
            if holder and holder.id != current.id:
                raise ConflictError()

        row = await self.store.update_status(booking_id, new_status)
        if row is None:
            raise NotFoundError("Booking not found")
        logger.info(f"🔄 Booking {booking_id}: {current.status.value} -> {new_status}")
        return Booking.model_validate(row)

    # --- Queries ---

    async def get_all(self) -> List[Booking]:
        rows = await self.store.list_bookings()
        bookings = [Booking.model_validate(row) for row in rows]
        return sorted(bookings, key=lambda b: (b.date, b.time))

    async def get_by_id(self, booking_id: str) -> Booking:
        row = await self.store.get_booking(booking_id)
        if not row:
            raise NotFoundError("Booking not found")
        return Booking.model_validate(row)

    async def get_in_range(self, start: DateLike, end: DateLike) -> List[Booking]:
        start_date = _normalize_or_400(start, "start")
        end_date = _normalize_or_400(end, "end")
        logger.info(f"📅 Fetching bookings from {start_date} to {end_date}")

        rows = await self.store.list_active_in_range(start_date, end_date)
        bookings = [Booking.model_validate(row) for row in rows]
        # YYYY-MM-DD and HH:MM sort correctly as strings
        bookings = [b for b in bookings if start_date <= b.date <= end_date and b.is_active]
        return sorted(bookings, key=lambda b: (b.date, b.time))

    # --- Notifications ---

    async def send_confirmation(self, booking_id: str) -> bool:
        booking = await self.get_by_id(booking_id)
        if booking.status != BookingStatus.CONFIRMED:
            raise ValidationError(
                "Booking is not confirmed",
                errors={"status": f"Confirmation can only be sent for confirmed bookings, not {booking.status.value}"},
            )
        # smtplib is blocking
        sent = await asyncio.to_thread(send_confirmation_email, booking)
        if not sent:
            logger.warning(f"⚠️ Confirmation email for booking {booking_id} was not sent")
        return sent


_booking_service: Optional[BookingService] = None


def get_booking_service() -> BookingService:
    """FastAPI dependency; overridden in tests."""
    global _booking_service
    if _booking_service is None:
        _booking_service = BookingService()
    return _booking_service
