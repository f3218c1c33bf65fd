from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from beauty_studio.core.dates import TIME_SLOT_PATTERN, normalize_date


class ServiceId(str, Enum):
    BRIDAL = "bridal"
    EVENING = "evening"
    DAILY = "daily"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Statuses that hold a slot
ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class CamelModel(BaseModel):
    # snake_case in Python and in the store, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- CREATE ---
class BookingCreate(CamelModel):
    service_id: ServiceId
    date: str
    time: str = Field(..., pattern=TIME_SLOT_PATTERN.pattern)
    client_name: str = Field(..., min_length=2)
    client_email: EmailStr
    client_phone: str = Field(..., min_length=6)
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_booking_date(cls, value: Any) -> str:
        return normalize_date(value)

    @field_validator("client_name", "client_phone", mode="before")
    @classmethod
    def strip_contact(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    def to_record(self) -> dict:
        """Store row (snake_case) for a new booking."""
        record = self.model_dump(mode="json")
        record["status"] = BookingStatus.PENDING.value
        return record


# --- STATUS UPDATE ---
class BookingStatusUpdate(BaseModel):
    # validated by the service so that unknown values get a 400, not a 422
    status: str


# --- RESPONSE ---
class Booking(CamelModel):
    id: str
    service_id: ServiceId
    date: str
    time: str
    client_name: str
    client_email: str
    client_phone: str
    notes: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("date", mode="before")
    @classmethod
    def normalize_stored_date(cls, value: Any) -> str:
        return normalize_date(value)

    @property
    def is_active(self) -> bool:
        return self.status.value in ACTIVE_STATUSES


class AvailabilityResponse(BaseModel):
    available: bool


class OccupiedSlotsResponse(BaseModel):
    date: str
    occupied: List[str]
    available: List[str]


class ConfirmationResponse(BaseModel):
    success: bool
