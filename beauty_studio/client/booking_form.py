import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from beauty_studio.client.api_client import ApiClientError, BookingApiClient, SlotTakenError
from beauty_studio.core.config_loader import get_service_ids, get_time_slots, is_closed_day, load_studio_config
from beauty_studio.core.logger import logger

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class FormValidationError(Exception):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("Booking form is invalid")
        self.errors = errors


@dataclass
class SlotPartition:
    available: List[str] = field(default_factory=list)
    occupied: List[str] = field(default_factory=list)


class BookingForm:
    """
    Booking form state and orchestration, without any rendering.

    Free/occupied slots are loaded for the selected date, and the chosen slot
    is re-checked right before submitting.
    """

    def __init__(self, api: BookingApiClient, config: Optional[dict] = None, today: Optional[date] = None):
        self.api = api
        self.config = config if config is not None else load_studio_config()
        self._today = today

        self.service_id: str = "daily"
        self.selected_date: Optional[date] = None
        self.selected_time: str = ""
        self.name: str = ""
        self.email: str = ""
        self.phone: str = ""
        self.notes: str = ""
        self.slots = SlotPartition()

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def time_slots(self) -> List[str]:
        return get_time_slots(self.config)

    def is_date_disabled(self, day: date) -> bool:
        # today itself stays bookable
        if day < self.today:
            return True
        return is_closed_day(self.config, day)

    def select_date(self, day: date) -> SlotPartition:
        if self.is_date_disabled(day):
            raise FormValidationError({"date": f"{day.isoformat()} is not available for booking"})
        self.selected_date = day
        self.selected_time = ""
        return self.load_time_slots(day)

    def load_time_slots(self, day: date) -> SlotPartition:
        try:
            occupied = set(self.api.get_occupied_times(day))
            partition = SlotPartition(
                available=[slot for slot in self.time_slots if slot not in occupied],
                occupied=[slot for slot in self.time_slots if slot in occupied],
            )
        except ApiClientError as e:
            logger.warning(f"⚠️ Batched slot lookup failed ({e}), checking slots one by one")
            partition = self._load_time_slots_sequentially(day)

        self.slots = partition
        if self.selected_time and self.selected_time not in partition.available:
            self.selected_time = ""
        return partition

    def _load_time_slots_sequentially(self, day: date) -> SlotPartition:
        # One request at a time to keep load on the server low
        partition = SlotPartition()
        for slot in self.time_slots:
            if self.api.check_availability(day, slot):
                partition.available.append(slot)
            else:
                partition.occupied.append(slot)
        return partition

    def select_time(self, time: str):
        if time not in self.slots.available:
            raise FormValidationError({"time": f"{time} is not available"})
        self.selected_time = time

    def validate(self) -> Dict[str, str]:
        errors = {}
        if len(self.name.strip()) < 2:
            errors["name"] = "Name is required"
        if not self.email.strip():
            errors["email"] = "Email is required"
        elif not EMAIL_PATTERN.fullmatch(self.email.strip()):
            errors["email"] = "Email is invalid"
        if len(self.phone.strip()) < 6:
            errors["phone"] = "Phone is required"
        if not self.selected_date:
            errors["date"] = "Date is required"
        if not self.selected_time:
            errors["time"] = "Time is required"
        if self.service_id not in get_service_ids(self.config):
            errors["service"] = "Service is required"
        return errors

    def submit(self) -> dict:
        """
        Creates the booking. Raises FormValidationError for invalid input and
        SlotTakenError when the slot went away; in that case the selected time
        is cleared and the slots are reloaded, the user has to choose again.
        """
        errors = self.validate()
        if errors:
            raise FormValidationError(errors)

        day, time = self.selected_date, self.selected_time
        if not self.api.check_availability(day, time):
            self._slot_taken(day, time)
            raise SlotTakenError("This time slot was just taken. Please choose another one.", 409)

        try:
            booking = self.api.create_booking({
                "serviceId": self.service_id,
                "date": day,
                "time": time,
                "clientName": self.name.strip(),
                "clientEmail": self.email.strip(),
                "clientPhone": self.phone.strip(),
                "notes": self.notes,
            })
        except SlotTakenError:
            self._slot_taken(day, time)
            raise

        logger.info(f"✅ Booking submitted: {booking.get('id')}")
        return booking

    def _slot_taken(self, day: date, time: str):
        logger.info(f"⚠️ Slot {day.isoformat()} {time} taken before submit")
        self.selected_time = ""
        self.load_time_slots(day)
