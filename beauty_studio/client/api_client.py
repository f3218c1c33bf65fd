"""
HTTP client for the booking API.

Read helpers used by the public form are forgiving: availability checks fail
closed and list reads return empty lists on error. Writes raise so the caller
can tell a taken slot from invalid input from a generic failure.
"""
from datetime import date
from typing import Dict, List, Optional, Union

import requests

from beauty_studio.client.session import AdminSession
from beauty_studio.core.config import settings
from beauty_studio.core.dates import normalize_date
from beauty_studio.core.logger import logger


class ApiClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SlotTakenError(ApiClientError):
    """The chosen slot was booked by someone else."""


class BookingRejectedError(ApiClientError):
    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None, status_code: int = 400):
        super().__init__(message, status_code)
        self.errors = errors or {}


def _error_message(response: requests.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    return data.get("message") or data.get("error") or default


class BookingApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[AdminSession] = None,
        http: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.session = session
        self.http = http or (session.http if session else requests.Session())
        self.timeout = timeout

    def _headers(self) -> dict:
        return self.session.auth_headers() if self.session else {}

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    # --- Availability ---

    def check_availability(self, day: Union[str, date], time: str) -> bool:
        """Any failure means "not available", never "available"."""
        try:
            response = self.http.get(
                self._url("/bookings/availability"),
                params={"date": normalize_date(day), "time": time},
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.error(f"❌ Availability check failed: {response.status_code} {response.text}")
                return False
            return response.json().get("available") is True
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error checking availability for {day} {time}: {e}")
            return False

    def get_occupied_times(self, day: Union[str, date]) -> List[str]:
        try:
            response = self.http.get(
                self._url("/bookings/occupied"),
                params={"date": normalize_date(day)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiClientError(f"Failed to load occupied slots: {e}")

        if response.status_code != 200:
            raise ApiClientError(_error_message(response, "Failed to load occupied slots"), response.status_code)
        return list(response.json().get("occupied", []))

    # --- Bookings ---

    def create_booking(self, booking: dict) -> dict:
        payload = dict(booking)
        payload["date"] = normalize_date(payload["date"])
        logger.info(f"📤 Creating booking for {payload['date']} {payload.get('time')}")

        try:
            response = self.http.post(self._url("/bookings"), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiClientError(f"Failed to create booking: {e}")

        if response.status_code == 201:
            return response.json()
        if response.status_code == 409:
            raise SlotTakenError(_error_message(response, "This time slot is already booked."), 409)
        if response.status_code == 400:
            try:
                errors = response.json().get("errors")
            except ValueError:
                errors = None
            raise BookingRejectedError(_error_message(response, "Invalid booking data"), errors)
        raise ApiClientError(_error_message(response, "Failed to create booking"), response.status_code)

    def get_bookings(self) -> List[dict]:
        try:
            response = self.http.get(self._url("/bookings"), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error fetching bookings: {e}")
            return []

    def get_bookings_in_range(self, start: Union[str, date], end: Union[str, date]) -> List[dict]:
        try:
            response = self.http.get(
                self._url("/bookings/range"),
                params={"start": normalize_date(start), "end": normalize_date(end)},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error fetching bookings in range: {e}")
            return []

    def update_booking_status(self, booking_id: str, status: str) -> dict:
        try:
            response = self.http.patch(
                self._url(f"/bookings/{booking_id}/status"),
                json={"status": status},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiClientError(f"Failed to update booking status: {e}")

        if response.status_code != 200:
            raise ApiClientError(_error_message(response, "Failed to update booking status"), response.status_code)
        return response.json()

    def send_confirmation_email(self, booking_id: str) -> bool:
        try:
            response = self.http.post(
                self._url(f"/bookings/{booking_id}/confirmation"),
                headers=self._headers(),
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.error(f"❌ Confirmation email request failed: {response.status_code}")
                return False
            return response.json().get("success") is True
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Error sending confirmation email: {e}")
            return False
