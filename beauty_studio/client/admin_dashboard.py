import calendar
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from beauty_studio.client.api_client import BookingApiClient
from beauty_studio.client.session import AdminSession
from beauty_studio.core.dates import normalize_date
from beauty_studio.core.logger import logger


class NotAuthenticatedError(Exception):
    pass


@dataclass
class StatusChange:
    booking: dict
    # None when no notification was attempted
    notified: Optional[bool] = None


class AdminDashboard:
    def __init__(self, api: BookingApiClient, session: AdminSession):
        self.api = api
        self.session = session
        self.bookings: List[dict] = []

    def _require_admin(self):
        if not self.session.is_admin:
            raise NotAuthenticatedError("Admin login required")

    def load_month(self, year: int, month: int) -> List[dict]:
        self._require_admin()
        last_day = calendar.monthrange(year, month)[1]
        self.bookings = self.api.get_bookings_in_range(date(year, month, 1), date(year, month, last_day))
        logger.info(f"📅 Loaded {len(self.bookings)} bookings for {year}-{month:02d}")
        return self.bookings

    def bookings_on(self, day: date) -> List[dict]:
        wanted = normalize_date(day)
        return [b for b in self.bookings if normalize_date(b["date"]) == wanted]

    def confirm(self, booking_id: str, notify: bool = True) -> StatusChange:
        """
        Confirms the booking, then sends the confirmation email. The status
        change stands even if the email fails; the outcome is reported.
        """
        self._require_admin()
        booking = self.api.update_booking_status(booking_id, "confirmed")
        self._replace(booking)

        if not notify:
            return StatusChange(booking)

        notified = self.api.send_confirmation_email(booking_id)
        if not notified:
            logger.warning(f"⚠️ Booking {booking_id} confirmed but the client was not notified")
        return StatusChange(booking, notified)

    def cancel(self, booking_id: str) -> StatusChange:
        self._require_admin()
        booking = self.api.update_booking_status(booking_id, "cancelled")
        self._replace(booking)
        return StatusChange(booking)

    def _replace(self, booking: dict):
        self.bookings = [booking if b.get("id") == booking.get("id") else b for b in self.bookings]
